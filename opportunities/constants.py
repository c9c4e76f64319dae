"""
Fixed vocabularies offered to clients for opportunity and profile forms.
"""

CAUSES = [
    'Education',
    'Environment',
    'Animal Welfare',
    'Health',
    'Homelessness',
    'Hunger Relief',
    'Disaster Relief',
    'Poverty',
    'Children & Youth',
    'Seniors',
    'Veterans',
    'Disabilities',
    'Arts & Culture',
    'Community Development',
    'Human Rights',
    "Women's Issues",
    'LGBTQ+',
    'Technology',
]

CAUSE_TYPES = [
    'Animal Rescue',
    'Education',
    'Environment',
    'Health',
    'Social Services',
    'Youth Development',
    'Other',
]

COMMON_SKILLS = [
    'Teaching',
    'Mentoring',
    'Event Planning',
    'Fundraising',
    'Marketing',
    'Social Media',
    'Graphic Design',
    'Web Development',
    'Writing',
    'Photography',
    'Translation',
    'First Aid',
    'Cooking',
    'Construction',
    'Driving',
    'Administrative',
    'Counseling',
    'Animal Care',
    'Gardening',
    'Public Speaking',
]
