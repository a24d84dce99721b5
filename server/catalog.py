"""Fixed reference data served by the API."""

ACT_TOPICS = {
    "english": [
        "Grammar and Usage", "Punctuation", "Sentence Structure", "Rhetorical Skills",
        "Style", "Organization", "Strategy", "Subject-Verb Agreement", "Pronoun Usage",
        "Verb Tenses", "Modifiers", "Parallel Structure", "Comma Usage", "Apostrophes",
        "Colons and Semicolons", "Dashes and Parentheses",
    ],
    "math": [
        "Pre-Algebra", "Elementary Algebra", "Intermediate Algebra", "Coordinate Geometry",
        "Plane Geometry", "Trigonometry", "Linear Equations", "Quadratic Equations",
        "Functions", "Matrices", "Probability", "Statistics", "Number Properties",
        "Ratios and Proportions", "Percentages", "Exponents and Logarithms",
    ],
    "reading": [
        "Prose Fiction", "Social Science", "Humanities", "Natural Science",
        "Main Idea", "Supporting Details", "Inferences", "Author's Purpose",
        "Vocabulary in Context", "Comparative Reading", "Tone and Style",
        "Textual Evidence", "Summarization", "Literary Analysis",
    ],
    "science": [
        "Data Representation", "Research Summaries", "Conflicting Viewpoints",
        "Biology", "Chemistry", "Physics", "Earth Science", "Scientific Method",
        "Experimental Design", "Data Analysis", "Graph Interpretation",
        "Variables and Controls", "Scientific Reasoning",
    ],
    "writing": [
        "Essay Structure", "Thesis Development", "Argument Building",
        "Evidence and Examples", "Counterarguments", "Transitions",
        "Introduction Techniques", "Conclusion Strategies", "Perspective Analysis",
    ],
}

# Official section lengths; generated sections are capped separately.
SECTION_CONFIG = {
    "english": {"name": "English", "questions": 75, "time": 45},
    "math": {"name": "Mathematics", "questions": 60, "time": 60},
    "reading": {"name": "Reading", "questions": 40, "time": 35},
    "science": {"name": "Science", "questions": 40, "time": 35},
}
SECTION_ORDER = ["english", "math", "reading", "science"]
MAX_GENERATED_QUESTIONS = 10

ESSAY_PROMPTS = [
    {
        "id": "education-1",
        "category": "Education",
        "topic": "Technology in Education",
        "introduction": "The role of technology in education has become increasingly prominent...",
        "perspectives": [
            {"name": "Perspective One", "description": "Technology enhances learning by providing access to vast resources and interactive tools."},
            {"name": "Perspective Two", "description": "Over-reliance on technology may diminish critical thinking and interpersonal skills."},
            {"name": "Perspective Three", "description": "A balanced approach integrating technology with traditional methods is most effective."},
        ],
        "instructions": "Write a unified essay in which you evaluate multiple perspectives on technology in education.",
    },
    {
        "id": "society-1",
        "category": "Society",
        "topic": "Social Media Impact",
        "introduction": "Social media platforms have transformed how people communicate and share information...",
        "perspectives": [
            {"name": "Perspective One", "description": "Social media democratizes information and enables global connections."},
            {"name": "Perspective Two", "description": "Social media contributes to misinformation and mental health issues."},
            {"name": "Perspective Three", "description": "The impact of social media depends largely on how individuals choose to use it."},
        ],
        "instructions": "Write a unified essay evaluating perspectives on social media's impact on society.",
    },
    {
        "id": "environment-1",
        "category": "Environment",
        "topic": "Climate Change Action",
        "introduction": "Climate change presents one of the most pressing challenges facing humanity...",
        "perspectives": [
            {"name": "Perspective One", "description": "Immediate and drastic action is necessary to prevent catastrophic consequences."},
            {"name": "Perspective Two", "description": "Economic considerations must be balanced with environmental concerns."},
            {"name": "Perspective Three", "description": "Technological innovation will naturally solve environmental problems."},
        ],
        "instructions": "Write a unified essay evaluating perspectives on addressing climate change.",
    },
]

CHAT_PROMPTS = [
    {"category": "Math", "text": "Explain how to solve quadratic equations"},
    {"category": "Math", "text": "Help me understand trigonometric identities"},
    {"category": "Math", "text": "What are the key formulas for the ACT math section?"},
    {"category": "English", "text": "Explain the difference between who and whom"},
    {"category": "English", "text": "Help me with comma rules"},
    {"category": "English", "text": "What are common grammar mistakes on the ACT?"},
    {"category": "Reading", "text": "How do I improve my reading speed?"},
    {"category": "Reading", "text": "Explain strategies for answering inference questions"},
    {"category": "Science", "text": "How do I read scientific graphs quickly?"},
    {"category": "Science", "text": "Explain the conflicting viewpoints question type"},
    {"category": "Writing", "text": "How do I structure an ACT essay?"},
    {"category": "Writing", "text": "Give me tips for writing a strong thesis"},
    {"category": "General", "text": "Create a practice quiz on algebra"},
    {"category": "General", "text": "What score do I need for my target colleges?"},
]

ACHIEVEMENTS = [
    {"id": "first_lesson", "name": "First Lesson", "description": "Complete your first lesson", "icon": "📚", "xp": 50},
    {"id": "quiz_master", "name": "Quiz Master", "description": "Complete 10 quizzes", "icon": "🎯", "xp": 100},
    {"id": "perfect_score", "name": "Perfect Score", "description": "Get 100% on a quiz", "icon": "💯", "xp": 150},
    {"id": "test_taker", "name": "Test Taker", "description": "Complete a practice test", "icon": "📝", "xp": 200},
    {"id": "week_warrior", "name": "Week Warrior", "description": "Study for 7 days in a row", "icon": "🔥", "xp": 100},
    {"id": "month_master", "name": "Month Master", "description": "Study for 30 days in a row", "icon": "🏆", "xp": 500},
    {"id": "subject_expert", "name": "Subject Expert", "description": "Score 90%+ in a subject", "icon": "⭐", "xp": 150},
    {"id": "early_bird", "name": "Early Bird", "description": "Study before 8 AM", "icon": "🌅", "xp": 50},
    {"id": "night_owl", "name": "Night Owl", "description": "Study after 10 PM", "icon": "🦉", "xp": 50},
    {"id": "speed_demon", "name": "Speed Demon", "description": "Complete a quiz in under 5 minutes", "icon": "⚡", "xp": 75},
    {"id": "perfectionist", "name": "Perfectionist", "description": "Get 5 perfect quiz scores", "icon": "✨", "xp": 250},
    {"id": "essay_writer", "name": "Essay Writer", "description": "Submit 5 essays for grading", "icon": "✍️", "xp": 100},
    {"id": "flashcard_fan", "name": "Flashcard Fan", "description": "Study 100 flashcards", "icon": "🃏", "xp": 75},
]

TIMEZONES = [
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Anchorage",
    "Pacific/Honolulu",
    "Europe/London",
    "Europe/Paris",
    "Europe/Berlin",
    "Asia/Tokyo",
    "Asia/Shanghai",
    "Asia/Singapore",
    "Australia/Sydney",
    "UTC",
]

DEFAULT_USER_SETTINGS = {
    "theme": "light",
    "notifications": True,
    "studyReminders": True,
    "defaultModel": "deepseek-v3",
    "timezone": "America/New_York",
}

SETTINGS_KEYS = (
    "theme",
    "notifications",
    "studyReminders",
    "reminderTime",
    "reminderDays",
    "defaultModel",
    "timezone",
    "profileVisibility",
    "dataSharing",
    "fontSize",
    "highContrast",
    "language",
)

# Per-user collections, in cascade-delete order after the user record.
USER_COLLECTIONS = (
    "progress",
    "lessons",
    "quizzes",
    "tests",
    "chat_history",
    "study_plans",
    "essays",
    "flashcards",
)
