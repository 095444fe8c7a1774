from pydantic import BaseModel, Field
from typing import Optional, List


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None


class GenerationSnapshot(BaseModel):
    session_id: str
    status: str
    language: str
    max_words: int
    keywords: List[str] = Field(default_factory=list)
    cover_letter: str = ""
    short_profile: str = ""
    error: Optional[str] = None


class ParsedDocumentResponse(BaseModel):
    filename: str
    text: str
    characters: int


class DraftPayload(BaseModel):
    cv_text: Optional[str] = None
    job_description: Optional[str] = None
    keywords: Optional[List[str]] = None
    cover_letter: Optional[str] = None
    short_profile: Optional[str] = None


class DraftResponse(BaseModel):
    owner_id: str
    cv_text: str = ""
    job_description: str = ""
    keywords: List[str] = Field(default_factory=list)
    cover_letter: str = ""
    short_profile: str = ""
