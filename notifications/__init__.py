"""
Notifications App for VolunteerMatch.

In-app notifications with realtime WebSocket delivery.

Usage:
    from notifications.services import send_notification

    send_notification(
        user=organization,
        notification_type='application',
        message='Jane has applied to your opportunity "Beach Cleanup"',
        opportunity=opportunity,
    )
"""
