"""
Pytest configuration and fixtures for engine tests.
"""

import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from crud_engine.main import create_app
from crud_engine.models import Base
from crud_engine.routers import build_composite_key_router, build_crud_router, build_nested_router
from crud_shared.infrastructure.db import get_db
from tests.library import (
    Author,
    AuthorOutput,
    AuthorRequest,
    Book,
    BookOutput,
    BookRequest,
    Chapter,
    ChapterOutput,
    ChapterRequest,
    author_books_service,
    author_mapper,
    author_service,
    book_chapters_service,
    chapter_mapper,
    book_mapper,
)


_id_counter = itertools.count(1000)


def next_id() -> int:
    """Unique id for rows created directly in tests."""
    return next(_id_counter)


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app():
    """Application exposing the library resources."""
    return create_app(
        build_crud_router(
            "/api/authors",
            author_service,
            author_mapper,
            AuthorRequest,
            AuthorOutput,
            tags=["authors"],
        ),
        build_nested_router(
            "/api/authors/{parent_id}/books",
            author_books_service,
            book_mapper,
            BookRequest,
            BookOutput,
            tags=["books"],
        ),
        build_composite_key_router(
            "/api/books/{parent_id}/chapters",
            book_chapters_service,
            chapter_mapper,
            ChapterRequest,
            ChapterOutput,
            tags=["chapters"],
        ),
        title="Library API",
    )


@pytest.fixture(scope="function")
def client(app, db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def seed_author(db_session):
    """An author without books."""
    author = Author(id=next_id(), first_name="John", last_name="Doe", email="john@example.com")
    db_session.add(author)
    db_session.commit()
    db_session.refresh(author)
    return author


@pytest.fixture
def seed_book(db_session, seed_author):
    """A book by seed_author, counted on the author."""
    book = Book(id=next_id(), author_id=seed_author.id, title="Dune", pages=412, genre="fiction")
    seed_author.book_count = 1
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def seed_chapters(db_session, seed_book):
    """Three chapters of seed_book."""
    chapters = [
        Chapter(book_id=seed_book.id, number=n, title=f"Part {n}", word_count=1000 * n)
        for n in (1, 2, 3)
    ]
    db_session.add_all(chapters)
    db_session.commit()
    return chapters
