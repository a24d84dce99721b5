"""Pydantic request schemas for the ACT Tutor API. Field names match the JSON bodies."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


# ---- Auth ----

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    name: Optional[str] = Field(default=None, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)  # email or username
    password: str = Field(..., min_length=1, max_length=128)
    remember: bool = False


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=128)
    bio: Optional[str] = Field(default=None, max_length=2000)
    email: Optional[str] = Field(default=None, max_length=255)


class PasswordChangeRequest(BaseModel):
    currentPassword: str = Field(..., min_length=1, max_length=128)
    newPassword: str = Field(..., min_length=8, max_length=128)


# ---- Lessons ----

class LessonGenerateRequest(BaseModel):
    subject: str = Field(..., min_length=1)
    topic: Optional[str] = None
    customTopic: Optional[str] = None
    difficulty: Optional[str] = None
    length: Optional[str] = None
    focusAreas: Optional[List[str]] = None
    model: Optional[str] = None


class LessonUpdateRequest(BaseModel):
    notes: Optional[str] = None
    completed: Optional[bool] = None
    favorite: Optional[bool] = None


class BulkDeleteRequest(BaseModel):
    ids: List[str]


# ---- Quizzes ----

class QuizGenerateRequest(BaseModel):
    subject: str = Field(..., min_length=1)
    topic: Optional[str] = None
    customTopic: Optional[str] = None
    numQuestions: Optional[int] = None
    difficulty: Optional[str] = None
    timed: bool = False
    timeLimit: Optional[int] = Field(default=None, ge=1)
    model: Optional[str] = None


class QuizAnswersRequest(BaseModel):
    answers: Dict[str, Optional[str]] = Field(default_factory=dict)
    flagged: Optional[Dict[str, bool]] = None


class QuizSubmitRequest(BaseModel):
    answers: Dict[str, Optional[str]] = Field(default_factory=dict)
    timeSpent: Optional[int] = Field(default=None, ge=0)


# ---- Practice tests ----

class PracticeTestGenerateRequest(BaseModel):
    sections: Optional[List[str]] = None
    fullTest: bool = False
    model: Optional[str] = None


class SectionAnswersRequest(BaseModel):
    answers: Dict[str, Optional[str]] = Field(default_factory=dict)


class SectionCompleteRequest(BaseModel):
    answers: Dict[str, Optional[str]] = Field(default_factory=dict)
    timeSpent: Optional[int] = Field(default=None, ge=0)


# ---- Essays ----

class EssayPromptGenerateRequest(BaseModel):
    category: Optional[str] = None
    model: Optional[str] = None


class EssayCreateRequest(BaseModel):
    prompt: Optional[Union[Dict[str, Any], str]] = None
    promptId: Optional[str] = None
    customPrompt: Optional[str] = None
    timed: bool = False
    timeLimit: Optional[int] = Field(default=None, ge=1)


class EssayUpdateRequest(BaseModel):
    content: Optional[str] = None
    timeSpent: Optional[int] = Field(default=None, ge=0)


class EssaySubmitRequest(BaseModel):
    content: Optional[str] = None
    timeSpent: Optional[int] = Field(default=None, ge=0)
    model: Optional[str] = None


class ModelChoice(BaseModel):
    model: Optional[str] = None


# ---- Flashcards ----

class CardInput(BaseModel):
    front: str = Field(..., min_length=1)
    back: str = Field(..., min_length=1)
    tags: Optional[List[str]] = None


class CardUpdateRequest(BaseModel):
    front: Optional[str] = None
    back: Optional[str] = None
    tags: Optional[List[str]] = None


class DeckCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    subject: Optional[str] = None
    topic: Optional[str] = None
    cards: List[CardInput] = Field(default_factory=list)


class DeckGenerateRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    count: int = Field(default=10, ge=1, le=50)
    title: Optional[str] = None
    subject: Optional[str] = None
    model: Optional[str] = None


class DeckUpdateRequest(BaseModel):
    title: Optional[str] = None
    subject: Optional[str] = None
    topic: Optional[str] = None


class ReviewRequest(BaseModel):
    rating: int  # 1=again, 2=hard, 3=good, 4=easy


# ---- Study plans ----

class PlanGenerateRequest(BaseModel):
    targetScore: int = Field(..., ge=1, le=36)
    testDate: str = Field(..., min_length=1)
    currentScore: Optional[int] = Field(default=None, ge=1, le=36)
    hoursPerDay: Optional[float] = Field(default=None, gt=0)
    daysPerWeek: Optional[List[str]] = None
    weakSubjects: Optional[List[str]] = None
    strongSubjects: Optional[List[str]] = None
    learningStyle: Optional[str] = None
    timePreference: Optional[List[str]] = None
    otherCommitments: Optional[str] = None
    model: Optional[str] = None


class CompleteTaskRequest(BaseModel):
    week: Union[int, str]
    day: str
    taskIndex: int = Field(..., ge=0)


class CustomTaskRequest(BaseModel):
    date: Optional[str] = None
    time: Optional[str] = None
    subject: Optional[str] = None
    activity: Optional[str] = None
    duration: Optional[int] = None


class CustomTaskUpdateRequest(CustomTaskRequest):
    completed: Optional[bool] = None


class PlanUpdateRequest(BaseModel):
    active: Optional[bool] = None
    title: Optional[str] = None


# ---- Chat ----

class ConversationCreateRequest(BaseModel):
    title: Optional[str] = None
    model: Optional[str] = None


class MessageRequest(BaseModel):
    content: str = ""
    model: Optional[str] = None


class ConversationUpdateRequest(BaseModel):
    title: Optional[str] = None
    model: Optional[str] = None
    pinned: Optional[bool] = None


# ---- Progress ----

class StudyTimeRequest(BaseModel):
    minutes: int = Field(default=0, ge=0)
    subject: Optional[str] = None
    activity: Optional[str] = None


# ---- Settings ----

class SettingsUpdateRequest(BaseModel):
    theme: Optional[str] = None
    notifications: Optional[bool] = None
    studyReminders: Optional[bool] = None
    reminderTime: Optional[str] = None
    reminderDays: Optional[List[str]] = None
    defaultModel: Optional[str] = None
    timezone: Optional[str] = None
    profileVisibility: Optional[str] = None
    dataSharing: Optional[bool] = None
    fontSize: Optional[str] = None
    highContrast: Optional[bool] = None
    language: Optional[str] = None


class DeleteAccountRequest(BaseModel):
    password: str = Field(..., min_length=1)
