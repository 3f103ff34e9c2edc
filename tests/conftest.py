"""
Shared fixtures: in-memory SQLite database, a seeded 6e class and a test client.

Seeded trimester "first" / "2025-2026" (coefficients MATH 3, FR 3, EPS 1):

    Mensah Ama     MATH 12,14,C13 -> 17.33   FR 10,12,C11 -> 14.67   general 16.00
    Agbeko Kodjo   MATH  8,10,C9  -> 12.00   FR  8, 8,C7  -> 10.00   general 11.00
    Lawson Afi     MATH 10,14,C12 -> 16.00   FR  6, 6,C3  ->  6.00   general 11.00
    Dossou Yao     no grades

Subject average (I1 + I2 + 2*C) / 3; general average weighted by coefficient.
Agbeko and Lawson tie on 11.00 and share rank 2.
"""

import os

os.environ.setdefault("SQLITE_PATH", ":memory:")
os.environ.setdefault("REQUEST_LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import Base, get_db
from models.classes import Classroom
from models.students import Student
from models.subjects import Subject
from services.grade_store import GradeStore

YEAR = "2025-2026"


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def store(db):
    return GradeStore(db)


@pytest.fixture
def school(db):
    """Classes, subjects and students without any grade."""
    class_a = Classroom(name="6e A", level="college", grade_name="6e", academic_year=YEAR)
    class_b = Classroom(name="6e B", level="college", grade_name="6e", academic_year=YEAR)
    terminale = Classroom(name="Tle D", level="lycee", grade_name="Tle", series="D", academic_year=YEAR)
    db.add_all([class_a, class_b, terminale])
    db.flush()

    subjects = {
        "math": Subject(name="Mathématiques", code="MATH", coefficient=3, level="college", series=[]),
        "fr": Subject(name="Français", code="FR", coefficient=3, level="college", series=[]),
        "eps": Subject(name="EPS", code="EPS", coefficient=1, level="college", series=[]),
        "philo": Subject(name="Philosophie", code="PHILO", coefficient=2, level="lycee", series=["A4"]),
        "svt": Subject(name="SVT", code="SVT", coefficient=4, level="lycee", series=["C", "D"]),
    }
    db.add_all(subjects.values())

    students = {
        "ama": Student(matricule="TG0001", first_name="Ama", last_name="Mensah", gender="female", class_id=class_a.id),
        "kodjo": Student(matricule="TG0002", first_name="Kodjo", last_name="Agbeko", gender="male", class_id=class_a.id),
        "afi": Student(matricule="TG0003", first_name="Afi", last_name="Lawson", gender="female", class_id=class_a.id),
        "yao": Student(matricule="TG0004", first_name="Yao", last_name="Dossou", gender="male", class_id=class_a.id),
        "esi": Student(matricule="TG0100", first_name="Esi", last_name="Amegah", gender="female", class_id=terminale.id),
    }
    db.add_all(students.values())
    db.commit()

    return {
        "class_a": class_a,
        "class_b": class_b,
        "terminale": terminale,
        "subjects": subjects,
        "students": students,
    }


@pytest.fixture
def graded_school(school, store):
    """The seeded class with the first-trimester grades from the module docstring."""
    s, sub = school["students"], school["subjects"]
    table = [
        ("ama", "math", 12, 14, 13),
        ("ama", "fr", 10, 12, 11),
        ("kodjo", "math", 8, 10, 9),
        ("kodjo", "fr", 8, 8, 7),
        ("afi", "math", 10, 14, 12),
        ("afi", "fr", 6, 6, 3),
    ]
    for student, subject, i1, i2, comp in table:
        store.upsert(
            s[student].id, sub[subject].id, "first", YEAR,
            interrogation1=i1, interrogation2=i2, composition=comp,
        )
    return school


@pytest.fixture
def client(db):
    from main import app

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
