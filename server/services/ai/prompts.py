"""Prompt templates. Each returns (system_prompt, user_prompt)."""

from typing import Any, Dict, List, Tuple

TUTOR_SYSTEM = """You are an expert ACT tutor. Help students understand concepts, solve problems, and prepare for the ACT test.

Guidelines:
- Be encouraging and supportive
- Explain concepts clearly with examples
- Use proper mathematical notation (LaTeX: $...$ for inline, $$...$$ for display)
- Reference specific ACT test strategies when relevant
- If asked to create quizzes or practice problems, format them clearly
- Provide step-by-step solutions when solving problems"""

SECTION_TOPICS = {
    "english": ("English", "grammar, punctuation, sentence structure, rhetorical skills"),
    "math": ("Mathematics", "algebra, geometry, trigonometry, statistics, pre-calculus"),
    "reading": ("Reading", "prose fiction, social science, humanities, natural science passages"),
    "science": ("Science", "data representation, research summaries, conflicting viewpoints"),
}


def lesson(subject: str, topic: str, difficulty: str, length: str, focus_areas: List[str]) -> Tuple[str, str]:
    system = (
        "You are an expert ACT tutor helping students prepare for the ACT test. "
        "Provide clear, accurate, and helpful educational content."
    )
    user = f"""Generate a comprehensive lesson on the following:

Subject: {subject}
Topic: {topic}
Difficulty: {difficulty}
Lesson Length: {length}
Focus Areas: {', '.join(focus_areas)}

Create a well-structured lesson that includes:
1. Clear learning objectives
2. Introduction to the topic
3. Main content with explanations
4. Examples (use $...$ for inline math and $$...$$ for display math)
5. Practice problems with solutions
6. Key takeaways and test strategies
7. Summary

Format the lesson in Markdown with proper headings (##, ###), bullet points, and code blocks where appropriate."""
    return system, user


def quiz(subject: str, topic: str, num_questions: int, difficulty: str) -> Tuple[str, str]:
    system = (
        "You are an expert ACT test question writer. Create realistic, challenging "
        "questions that match the ACT format and difficulty."
    )
    user = f"""Generate {num_questions} multiple-choice questions for ACT {subject} on the topic: {topic}
Difficulty level: {difficulty}

For each question provide the question text, four options labeled A-D, the correct letter and an explanation.

Format your response as a JSON array:
[
  {{
    "question": "Question text here",
    "options": {{"A": "First option", "B": "Second option", "C": "Third option", "D": "Fourth option"}},
    "correctAnswer": "A",
    "explanation": "Explanation here"
  }}
]

Only output the JSON array, no other text."""
    return system, user


def practice_section(section: str, num_questions: int) -> Tuple[str, str]:
    name, topics = SECTION_TOPICS[section]
    system = (
        "You are an expert ACT test creator. Generate realistic test content "
        "that matches the official ACT format."
    )
    user = f"""Generate a realistic ACT {name} section with {num_questions} questions.
Topics to cover: {topics}

For reading/science sections, include passages followed by questions.
For math/english, create standalone questions or questions with short passages.

Format your response as JSON:
{{
  "section": "{section}",
  "passages": [
    {{
      "text": "Passage text here if applicable",
      "questions": [
        {{
          "question": "Question text",
          "options": {{"A": "", "B": "", "C": "", "D": ""}},
          "correctAnswer": "A",
          "explanation": ""
        }}
      ]
    }}
  ]
}}

Only output valid JSON."""
    return system, user


def study_plan(params: Dict[str, Any]) -> Tuple[str, str]:
    system = "You are an expert ACT prep tutor and study coach. Create effective, personalized study plans."
    user = f"""Create a personalized ACT study plan based on the following:

Current Score: {params.get('currentScore') or 'Not taken yet'}
Target Score: {params['targetScore']}
Test Date: {params['testDate']}
Study Hours Per Day: {params['hoursPerDay']}
Study Days Per Week: {', '.join(params['daysPerWeek'])}
Weak Subjects: {', '.join(params['weakSubjects'])}
Strong Subjects: {', '.join(params['strongSubjects'])}
Learning Style: {params['learningStyle']}
Study Time Preference: {', '.join(params['timePreference'])}
Other Commitments: {params.get('otherCommitments') or 'None specified'}

Create a week-by-week plan that focuses on weak areas, maintains strong areas,
schedules practice tests, gives daily tasks with time allocations, includes rest
and review days, and sets milestone goals.

Format as JSON:
{{
  "summary": "Brief overview of the plan",
  "totalWeeks": 8,
  "estimatedImprovement": 4,
  "weeks": [
    {{
      "week": 1,
      "focus": "Main focus for the week",
      "goals": ["Goal 1", "Goal 2"],
      "days": [
        {{
          "day": "Monday",
          "tasks": [
            {{"time": "6:00 PM - 7:00 PM", "subject": "Math", "activity": "Description", "resources": ""}}
          ]
        }}
      ]
    }}
  ],
  "milestones": [
    {{"week": 2, "milestone": "Complete algebra review", "targetScore": 24}}
  ]
}}

Only output valid JSON."""
    return system, user


def essay_grading(prompt: str, essay: str) -> Tuple[str, str]:
    system = "You are an experienced ACT Writing grader. Provide fair, constructive, and detailed feedback."
    user = f"""Grade the following essay based on the ACT Writing rubric.

PROMPT:
{prompt}

STUDENT ESSAY:
{essay}

Score each domain from 1 to 6: Ideas and Analysis, Development and Support,
Organization, Language Use and Conventions. "overall" is the 2-12 writing score.

Format your response as JSON:
{{
  "scores": {{
    "ideasAndAnalysis": 4,
    "developmentAndSupport": 4,
    "organization": 4,
    "languageUse": 4,
    "overall": 8
  }},
  "feedback": {{
    "ideasAndAnalysis": "Detailed feedback...",
    "developmentAndSupport": "Detailed feedback...",
    "organization": "Detailed feedback...",
    "languageUse": "Detailed feedback..."
  }},
  "strengths": ["Strength 1", "Strength 2"],
  "improvements": ["Improvement 1", "Improvement 2"],
  "grammarIssues": [
    {{"original": "text with error", "corrected": "corrected text", "explanation": "why"}}
  ],
  "overallComments": "Summary of the essay performance"
}}

Only output valid JSON."""
    return system, user


def flashcards(topic: str, count: int) -> Tuple[str, str]:
    system = "You are an expert ACT tutor creating study flashcards."
    user = f"""Generate {count} flashcards for ACT preparation on the topic: {topic}

Each flashcard has a concise front (question or term) and a complete back
(answer or definition). Use LaTeX for math ($...$ inline, $$...$$ display).

Format as JSON array:
[
  {{
    "front": "What is the quadratic formula?",
    "back": "$x = \\\\frac{{-b \\\\pm \\\\sqrt{{b^2 - 4ac}}}}{{2a}}$",
    "tags": ["math", "algebra"]
  }}
]

Only output the JSON array."""
    return system, user


def essay_prompt(category: str) -> Tuple[str, str]:
    system = "You are an expert ACT Writing prompt creator."
    user = f"""Generate an ACT Writing-style essay prompt about {category or 'a contemporary issue'}.

The prompt presents a debatable issue, three different perspectives, and clear instructions.

Format as JSON:
{{
  "topic": "Brief topic description",
  "introduction": "Context and background about the issue",
  "perspectives": [
    {{"name": "Perspective One", "description": "First viewpoint explained"}},
    {{"name": "Perspective Two", "description": "Second viewpoint explained"}},
    {{"name": "Perspective Three", "description": "Third viewpoint explained"}}
  ],
  "instructions": "Essay task instructions"
}}

Only output valid JSON."""
    return system, user
