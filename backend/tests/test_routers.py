"""
End-to-end tests for the generic routers.

Tests cover:
- Single-level endpoints (list, page, get, create, update, patch, delete)
- Nested and composite-key endpoints
- Error bodies and status codes
- Request correlation header
"""

from tests.conftest import next_id
from tests.library import Author, Book


class TestCrudRouter:
    """Tests for /api/authors."""

    def test_create_get_delete(self, client):
        response = client.post("/api/authors", json={"first_name": "Ursula", "last_name": "Le Guin"})
        assert response.status_code == 201
        author_id = response.json()["id"]

        response = client.get(f"/api/authors/{author_id}")
        assert response.status_code == 200
        assert response.json()["last_name"] == "Le Guin"

        response = client.delete(f"/api/authors/{author_id}")
        assert response.status_code == 204

        response = client.get(f"/api/authors/{author_id}")
        assert response.status_code == 404
        assert response.json() == {
            "code": "RESOURCE_NOT_FOUND",
            "message": f"Author (ID: {author_id}) not found",
        }

    def test_list_all_with_search(self, client, seed_author, db_session):
        db_session.add(Author(id=next_id(), first_name="Jane", last_name="Roe"))
        db_session.commit()

        response = client.get("/api/authors/all", params={"search": "JOHN DOE"})

        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [seed_author.id]

    def test_page(self, client, db_session):
        db_session.add_all([Author(id=i, first_name=f"A{i}") for i in range(1, 26)])
        db_session.commit()

        response = client.get("/api/authors", params={"page": 0, "size": 10})

        body = response.json()
        assert response.status_code == 200
        assert body["current_page"] == 1
        assert body["total_pages"] == 3
        assert body["total_elements"] == 25
        assert body["is_last_page"] is False
        assert len(body["items"]) == 10

    def test_page_sorted_descending(self, client, db_session):
        db_session.add_all([Author(id=i, first_name=f"A{i}") for i in range(1, 6)])
        db_session.commit()

        response = client.get("/api/authors", params={"size": 2, "sort": "id,desc"})

        assert [a["id"] for a in response.json()["items"]] == [5, 4]

    def test_sort_by_unknown_field(self, client):
        response = client.get("/api/authors", params={"sort": "password"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARGUMENT"

    def test_sort_with_bad_direction(self, client):
        response = client.get("/api/authors", params={"sort": "id,sideways"})

        assert response.status_code == 400

    def test_update(self, client, seed_author):
        response = client.put(
            f"/api/authors/{seed_author.id}",
            json={"first_name": "Johnny", "last_name": "Doe"},
        )

        assert response.status_code == 200
        assert response.json()["first_name"] == "Johnny"
        assert response.json()["email"] is None

    def test_update_missing(self, client):
        response = client.put("/api/authors/999", json={"first_name": "X"})

        assert response.status_code == 404

    def test_patch(self, client, seed_author):
        response = client.patch(
            f"/api/authors/{seed_author.id}",
            json={"last_name": None, "email": "ignored@example.com"},
        )

        assert response.status_code == 200
        assert response.json()["last_name"] is None
        assert response.json()["email"] == "john@example.com"

    def test_patch_bad_value(self, client, seed_author):
        response = client.patch(f"/api/authors/{seed_author.id}", json={"first_name": {"a": 1}})

        assert response.status_code == 400
        assert response.json()["code"] == "PATCH_FAILED"

    def test_patch_null_into_required_field(self, client, seed_author, db_session):
        response = client.patch(f"/api/authors/{seed_author.id}", json={"first_name": None})

        assert response.status_code == 400
        assert response.json()["code"] == "PATCH_FAILED"
        db_session.expire_all()
        assert db_session.get(Author, seed_author.id).first_name == "John"

    def test_delete_denied(self, client, seed_book):
        response = client.delete(f"/api/authors/{seed_book.author_id}")

        assert response.status_code == 409
        assert response.json()["message"] == "Author still has books"
        assert response.json()["code"] == "RESOURCE_CONFLICT"

    def test_non_numeric_id(self, client):
        response = client.get("/api/authors/abc")

        assert response.status_code == 400
        assert "expected type: int" in response.json()["message"]

    def test_body_validation_errors(self, client):
        response = client.post("/api/authors", json={"last_name": "Nobody"})

        body = response.json()
        assert response.status_code == 400
        assert body["field_errors"]["first_name"]["code"] == "REQUIRED_NOT_NULL"

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/authors/all", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"


class TestNestedRouter:
    """Tests for /api/authors/{parent_id}/books."""

    def test_create_and_list(self, client, seed_author):
        response = client.post(
            f"/api/authors/{seed_author.id}/books",
            json={"title": "The Dispossessed", "genre": "FICTION"},
        )
        assert response.status_code == 201
        assert response.json()["author_id"] == seed_author.id

        response = client.get(f"/api/authors/{seed_author.id}/books")
        assert [b["title"] for b in response.json()] == ["The Dispossessed"]

        response = client.get(f"/api/authors/{seed_author.id}")
        assert response.json()["book_count"] == 1

    def test_create_under_missing_parent(self, client):
        response = client.post("/api/authors/999/books", json={"title": "Orphan"})

        assert response.status_code == 404
        assert response.json()["message"] == "Author (ID: 999) not found"

    def test_invalid_enum_value(self, client, seed_author):
        response = client.post(f"/api/authors/{seed_author.id}/books", json={"title": "X", "genre": "poetry"})

        body = response.json()
        assert response.status_code == 400
        assert "FICTION, SCIENCE, HISTORY" in body["field_errors"]["genre"]["message"]

    def test_cross_parent_access(self, client, seed_book, db_session):
        other = Author(id=next_id(), first_name="Jane")
        db_session.add(other)
        db_session.commit()

        response = client.get(f"/api/authors/{other.id}/books/{seed_book.id}")

        assert response.status_code == 404
        assert response.json()["message"] == f"Book (ID: {seed_book.id}) not found"

    def test_update_and_delete(self, client, seed_book):
        base = f"/api/authors/{seed_book.author_id}/books/{seed_book.id}"

        response = client.put(base, json={"title": "Dune Messiah", "pages": 256})
        assert response.status_code == 200
        assert response.json()["title"] == "Dune Messiah"

        response = client.delete(base)
        assert response.status_code == 204
        assert client.get(base).status_code == 404


class TestCompositeKeyRouter:
    """Tests for /api/books/{parent_id}/chapters."""

    def test_get_by_token(self, client, seed_chapters):
        book_id = seed_chapters[0].book_id

        response = client.get(f"/api/books/{book_id}/chapters/2")

        assert response.status_code == 200
        assert response.json() == {"book_id": book_id, "number": 2, "title": "Part 2", "word_count": 2000}

    def test_malformed_token(self, client, seed_chapters):
        response = client.get(f"/api/books/{seed_chapters[0].book_id}/chapters/two")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARGUMENT"

    def test_create_update_delete(self, client, seed_book):
        base = f"/api/books/{seed_book.id}/chapters"

        response = client.post(base, json={"number": 1, "title": "Prologue"})
        assert response.status_code == 201

        response = client.put(f"{base}/1", json={"number": 1, "title": "Opening"})
        assert response.status_code == 200
        assert response.json()["title"] == "Opening"

        response = client.put(f"{base}/1", json={"number": 2, "title": "Moved"})
        assert response.status_code == 400

        response = client.delete(f"{base}/1")
        assert response.status_code == 204
        assert client.get(base).json() == []

    def test_create_with_rejected_number(self, client, seed_book):
        base = f"/api/books/{seed_book.id}/chapters"

        response = client.post(base, json={"number": 0, "title": "Preface"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARGUMENT"
        assert client.get(base).json() == []

    def test_chapters_of_missing_book(self, client):
        response = client.get("/api/books/999/chapters")

        assert response.status_code == 404
        assert response.json()["message"] == "Book (ID: 999) not found"


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
