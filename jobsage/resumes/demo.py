"""Sample resumes shown alongside uploaded ones."""

from datetime import datetime, timezone

from .models import ResumeRecord

DEMO_RESUMES: tuple[ResumeRecord, ...] = (
    ResumeRecord(
        id="demo-1",
        name="john_doe_resume.pdf",
        size=245760,
        upload_date=datetime(2024, 1, 15, tzinfo=timezone.utc),
        candidate="John Doe",
        skills=["React", "TypeScript", "Node.js"],
        experience="5 years",
    ),
    ResumeRecord(
        id="demo-2",
        name="sarah_smith_cv.pdf",
        size=180240,
        upload_date=datetime(2024, 1, 10, tzinfo=timezone.utc),
        candidate="Sarah Smith",
        skills=["Python", "Machine Learning", "Django"],
        experience="3 years",
    ),
    ResumeRecord(
        id="demo-3",
        name="mike_johnson_resume.pdf",
        size=198540,
        upload_date=datetime(2024, 1, 5, tzinfo=timezone.utc),
        candidate="Mike Johnson",
        skills=["Java", "Spring Boot", "AWS"],
        experience="7 years",
    ),
)


def is_demo_resume(resume_id: str) -> bool:
    return any(r.id == resume_id for r in DEMO_RESUMES)
