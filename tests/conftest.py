"""Pytest configuration and fixtures for edufilter tests."""

from datetime import datetime, timedelta, timezone

import pytest

MB = 1024 * 1024

# Fixed clock for relative date facets
NOW = datetime(2024, 6, 15, 12, 0, 0)


def _iso(value: datetime) -> str:
    return value.isoformat() + "Z"


@pytest.fixture
def fixed_now():
    """Clock returning a fixed naive UTC time."""
    return lambda: NOW


@pytest.fixture
def sample_tutors():
    """Tutor directory records."""
    return [
        {
            "id": "t1",
            "name": "Ana Pérez",
            "subjects": ["Math"],
            "average_rating": 4.8,
            "completed_sessions": 120,
            "location": "Bogotá",
            "availability": "morning",
        },
        {
            "id": "t2",
            "name": "Bruno Díaz",
            "subjects": ["Physics"],
            "average_rating": 3.5,
            "completed_sessions": 30,
            "location": "Medellín",
            "availability": "evening",
        },
        {
            "id": "t3",
            "name": "Carla Gómez",
            "subjects": ["Math", "Physics"],
            "average_rating": 4.1,
            "completed_sessions": 8,
            "location": "Bogotá",
            "availability": "weekend",
        },
        {
            "id": "t4",
            "name": "Diego Ruiz",
            "subjects": ["Chemistry"],
            "average_rating": None,
            "completed_sessions": 0,
            "location": None,
            "availability": "afternoon",
        },
    ]


@pytest.fixture
def sample_students():
    """Student roster records, with last sessions relative to the real clock."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return [
        {
            "id": "s1",
            "name": "Laura Torres",
            "email": "laura@example.com",
            "subjects": ["Math"],
            "total_sessions": 12,
            "completed_sessions": 11,
            "average_rating": 4.5,
            "last_session": _iso(now - timedelta(days=3)),
            "progress_level": "advanced",
        },
        {
            "id": "s2",
            "name": "Mateo Silva",
            "email": "mateo@example.com",
            "subjects": ["Physics", "Math"],
            "total_sessions": 6,
            "completed_sessions": 5,
            "average_rating": 3.2,
            "last_session": _iso(now - timedelta(days=60)),
            "progress_level": "intermediate",
        },
        {
            "id": "s3",
            "name": "Sofía Vargas",
            "email": "sofia@example.com",
            "subjects": ["Chemistry"],
            "total_sessions": 0,
            "completed_sessions": 0,
            "average_rating": None,
            "last_session": None,
            "progress_level": "beginner",
        },
    ]


@pytest.fixture
def sample_resources():
    """Resource library records."""
    return [
        {
            "id": "r1",
            "title": "Algebra basics",
            "description": "Intro to algebra",
            "subject_name": "Math",
            "tutor_name": "Ana Pérez",
            "file_type": "application/pdf",
            "file_size": 512 * 1024,
            "download_count": 75,
            "created_at": "2024-01-02T10:00:00Z",
        },
        {
            "id": "r2",
            "title": "Kinematics slides",
            "description": "",
            "subject_name": "Physics",
            "tutor_name": "Bruno Díaz",
            "file_type": "pptx",
            "file_size": 5 * MB,
            "download_count": 12,
            "created_at": "2023-12-31T18:00:00Z",
        },
        {
            "id": "r3",
            "title": "Lab worksheet",
            "description": "Titration lab",
            "subject_name": "Chemistry",
            "tutor_name": "Carla Gómez",
            "file_type": "docx",
            "file_size": 20 * MB,
            "download_count": 3,
            "created_at": "2024-02-10T08:30:00Z",
        },
        {
            "id": "r4",
            "title": "Lecture recording",
            "description": "Week 3 lecture",
            "subject_name": "Math",
            "tutor_name": "Ana Pérez",
            "file_type": "video/mp4",
            "file_size": MB,
            "download_count": 0,
            "created_at": "2024-03-01T00:00:00Z",
        },
    ]


@pytest.fixture
def sample_sessions():
    """Tutoring session records."""
    return [
        {
            "id": "x1",
            "title": "Algebra review",
            "subject_name": "Math",
            "status": "scheduled",
            "session_type": "virtual",
            "start_time": "2024-06-20T15:00:00Z",
            "duration_minutes": 60,
            "participant_count": 2,
        },
        {
            "id": "x2",
            "title": "Physics lab",
            "subject_name": "Physics",
            "status": "completed",
            "session_type": "presencial",
            "start_time": "2024-05-02T09:00:00Z",
            "duration_minutes": 120,
            "participant_count": 10,
        },
        {
            "id": "x3",
            "title": "Quick check-in",
            "subject_name": "Math",
            "status": "cancelled",
            "session_type": "virtual",
            "start_time": "2024-05-10T17:30:00Z",
            "duration_minutes": 15,
            "participant_count": 1,
        },
    ]


@pytest.fixture
def sample_conversations():
    """Conversation records as seen by tutor 'tutor-1'."""
    return [
        {
            "id": "c1",
            "tutor_id": "tutor-1",
            "student_id": "s1",
            "student_name": "Laura Torres",
            "last_message": "Can you share the file?",
            "last_message_time": "2024-06-14T10:00:00Z",
            "priority": "high",
            "unread_count": 2,
            "messages": [
                {
                    "sender_id": "s1",
                    "receiver_id": "tutor-1",
                    "content": "Can you share the file?",
                    "is_read": False,
                },
                {
                    "sender_id": "tutor-1",
                    "receiver_id": "s1",
                    "content": "Sure, see https://example.com/notes",
                    "is_read": True,
                },
            ],
        },
        {
            "id": "c2",
            "tutor_id": "tutor-1",
            "student_id": "s2",
            "student_name": "Mateo Silva",
            "last_message": "Thanks for the session",
            "last_message_time": "2024-05-01T08:00:00Z",
            "priority": "normal",
            "unread_count": 0,
            "messages": [
                {
                    "sender_id": "s2",
                    "receiver_id": "tutor-1",
                    "content": "Thanks for the session",
                    "is_read": True,
                },
            ],
        },
    ]


@pytest.fixture
def preset_db(tmp_path):
    """Path to a fresh preset database."""
    return tmp_path / "presets.db"


@pytest.fixture
def preset_store(preset_db):
    """Preset store backed by a temporary database."""
    from edufilter.filters.presets import PresetStore

    return PresetStore(preset_db)
