import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, NoReturn
from uuid import UUID

from boringblog.adapters.sqlite.database import Database, format_dt, parse_dt
from boringblog.components.listing.models import PostQuery
from boringblog.domain.entities import Post, PostAuthor, Tag, User
from boringblog.domain.errors import ConflictError

logger = logging.getLogger(__name__)


class SQLiteUserRepo:
    def __init__(self, db: Database):
        self.db = db

    def save(self, user: User) -> User:
        with self.db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO users (
                    id, email, name, password_hash, role,
                    reset_token, reset_token_expiry, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    name=excluded.name,
                    password_hash=excluded.password_hash,
                    role=excluded.role,
                    reset_token=excluded.reset_token,
                    reset_token_expiry=excluded.reset_token_expiry,
                    updated_at=excluded.updated_at
            """,
                (
                    str(user.id),
                    user.email,
                    user.name,
                    user.password_hash,
                    user.role,
                    user.reset_token,
                    format_dt(user.reset_token_expiry),
                    user.created_at.isoformat(),
                    user.updated_at.isoformat(),
                ),
            )
        return user

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._get_one("SELECT * FROM users WHERE id = ?", str(user_id))

    def get_by_email(self, email: str) -> User | None:
        # email column is COLLATE NOCASE
        return self._get_one("SELECT * FROM users WHERE email = ?", email.strip())

    def get_by_reset_token(self, token: str) -> User | None:
        return self._get_one("SELECT * FROM users WHERE reset_token = ?", token)

    def list_all(self) -> list[User]:
        conn = self.db.connect()
        try:
            rows = conn.execute("SELECT * FROM users ORDER BY created_at DESC").fetchall()
            return [self._map_row(row) for row in rows]
        finally:
            conn.close()

    def _get_one(self, sql: str, param: str) -> User | None:
        conn = self.db.connect()
        try:
            row = conn.execute(sql, (param,)).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            password_hash=row["password_hash"],
            role=row["role"],
            reset_token=row["reset_token"],
            reset_token_expiry=parse_dt(row["reset_token_expiry"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


def upsert_tags(conn: sqlite3.Connection, tags: list[Tag]) -> list[Tag]:
    """
    Resolve tags by name inside the caller's transaction.

    A name that already exists keeps its row; a concurrent writer that
    inserted the same name first wins and its row is returned.
    """
    resolved: list[Tag] = []
    for tag in tags:
        conn.execute(
            "INSERT INTO tags (id, name, slug) VALUES (?, ?, ?) ON CONFLICT(name) DO NOTHING",
            (str(tag.id), tag.name, tag.slug),
        )
        row = conn.execute("SELECT * FROM tags WHERE name = ?", (tag.name,)).fetchone()
        if row["id"] == str(tag.id):
            logger.info("Tag created: %s (%s)", tag.name, tag.slug)
        resolved.append(Tag(id=UUID(row["id"]), name=row["name"], slug=row["slug"]))
    return resolved


def _replace_tag_links(conn: sqlite3.Connection, post_id: UUID, tags: list[Tag]) -> None:
    conn.execute("DELETE FROM post_tags WHERE post_id = ?", (str(post_id),))
    for i, tag in enumerate(upsert_tags(conn, tags)):
        conn.execute(
            "INSERT INTO post_tags (post_id, tag_id, position) VALUES (?, ?, ?)",
            (str(post_id), str(tag.id), i),
        )


def _raise_conflict(e: sqlite3.IntegrityError, slug: str) -> NoReturn:
    message = str(e)
    if "posts.slug" in message:
        raise ConflictError(f"Slug already exists: {slug}") from e
    if "tags.slug" in message:
        raise ConflictError("Tag slug already exists, please retry") from e
    raise e


_POST_COLUMNS = """
    p.*,
    u.name AS author_name,
    u.role AS author_role
"""

_ORDER_BY = {
    "published_desc": "p.published_at DESC, p.created_at DESC",
    "pinned_first": "p.pinned DESC, p.published_at DESC, p.created_at DESC",
    "updated_desc": "p.updated_at DESC",
}

# Columns a partial update may write
_UPDATABLE_COLUMNS = frozenset(
    [
        "title",
        "content",
        "content_html",
        "cover_image",
        "published",
        "pinned",
        "published_at",
        "updated_at",
    ]
)


def _column_value(column: str, value: Any) -> Any:
    if column == "content":
        return json.dumps(value, ensure_ascii=False)
    if column in ("published", "pinned"):
        return int(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SQLitePostRepo:
    def __init__(self, db: Database):
        self.db = db

    def create(self, post: Post) -> Post:
        """Insert the post, upsert its tags and link them in one transaction."""
        try:
            with self.db.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO posts (
                        id, title, slug, content, content_html, cover_image,
                        published, pinned, published_at, author_id,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        str(post.id),
                        post.title,
                        post.slug,
                        json.dumps(post.content, ensure_ascii=False),
                        post.content_html,
                        post.cover_image,
                        int(post.published),
                        int(post.pinned),
                        format_dt(post.published_at),
                        str(post.author_id),
                        post.created_at.isoformat(),
                        post.updated_at.isoformat(),
                    ),
                )
                _replace_tag_links(conn, post.id, post.tags)
        except sqlite3.IntegrityError as e:
            _raise_conflict(e, post.slug)
        return post

    def update_fields(
        self, post_id: UUID, fields: dict[str, Any], tags: list[Tag] | None = None
    ) -> bool:
        """
        Write only the given columns, and replace the tag set when ``tags``
        is not None, in one transaction. ``published_at`` is only ever
        filled in, never overwritten.

        Returns False when the post no longer exists.
        """
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")

        assignments = []
        params: list[Any] = []
        for column, value in fields.items():
            if column == "published_at":
                assignments.append("published_at = COALESCE(published_at, ?)")
            else:
                assignments.append(f"{column} = ?")
            params.append(_column_value(column, value))

        try:
            with self.db.transaction() as conn:
                if assignments:
                    cursor = conn.execute(
                        f"UPDATE posts SET {', '.join(assignments)} WHERE id = ?",
                        [*params, str(post_id)],
                    )
                    if cursor.rowcount == 0:
                        return False
                elif not conn.execute(
                    "SELECT 1 FROM posts WHERE id = ?", (str(post_id),)
                ).fetchone():
                    return False

                if tags is not None:
                    _replace_tag_links(conn, post_id, tags)
        except sqlite3.IntegrityError as e:
            _raise_conflict(e, str(post_id))
        return True

    def get_by_slug(self, slug: str) -> Post | None:
        conn = self.db.connect()
        try:
            row = conn.execute(
                f"""
                SELECT {_POST_COLUMNS}
                FROM posts p JOIN users u ON u.id = p.author_id
                WHERE p.slug = ?
                """,
                (slug,),
            ).fetchone()
            if not row:
                return None
            return self._hydrate(conn, [row])[0]
        finally:
            conn.close()

    def delete(self, post_id: UUID) -> None:
        with self.db.transaction() as conn:
            # Explicit for databases created without ON DELETE CASCADE
            conn.execute("DELETE FROM post_tags WHERE post_id = ?", (str(post_id),))
            conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))

    def list_posts(self, query: PostQuery) -> tuple[list[Post], int]:
        where = ["p.published = ?"]
        params: list[Any] = [int(query.published)]

        if query.author_id is not None:
            where.append("p.author_id = ?")
            params.append(str(query.author_id))
        if query.author_name is not None:
            where.append("u.name = ?")
            params.append(query.author_name)
        if query.tag_slug is not None:
            where.append(
                "EXISTS (SELECT 1 FROM post_tags pt JOIN tags t ON t.id = pt.tag_id "
                "WHERE pt.post_id = p.id AND t.slug = ?)"
            )
            params.append(query.tag_slug)
        if query.pinned is not None:
            where.append("p.pinned = ?")
            params.append(int(query.pinned))
        if query.exclude_admin_authors:
            where.append("u.role != 'ADMIN'")

        base = (
            f"SELECT {_POST_COLUMNS} FROM posts p JOIN users u ON u.id = p.author_id "
            f"WHERE {' AND '.join(where)}"
        )

        conn = self.db.connect()
        try:
            row = conn.execute(f"SELECT COUNT(*) AS cnt FROM ({base})", params).fetchone()
            total = row["cnt"] if row else 0

            sql = f"{base} ORDER BY {_ORDER_BY[query.order]}"
            page_params = list(params)
            if query.limit is not None:
                sql += " LIMIT ? OFFSET ?"
                page_params.extend([query.limit, query.offset])
            elif query.offset:
                sql += " LIMIT -1 OFFSET ?"
                page_params.append(query.offset)

            rows = conn.execute(sql, page_params).fetchall()
            return self._hydrate(conn, rows), total
        finally:
            conn.close()

    def _hydrate(self, conn: sqlite3.Connection, rows: list[dict[str, Any]]) -> list[Post]:
        if not rows:
            return []

        ids = [row["id"] for row in rows]
        placeholders = ", ".join("?" for _ in ids)
        tag_rows = conn.execute(
            f"""
            SELECT pt.post_id, t.id, t.name, t.slug
            FROM post_tags pt JOIN tags t ON t.id = pt.tag_id
            WHERE pt.post_id IN ({placeholders})
            ORDER BY pt.position ASC
            """,
            ids,
        ).fetchall()

        tags_by_post: dict[str, list[Tag]] = {}
        for t in tag_rows:
            tags_by_post.setdefault(t["post_id"], []).append(
                Tag(id=UUID(t["id"]), name=t["name"], slug=t["slug"])
            )

        return [self._map_row(row, tags_by_post.get(row["id"], [])) for row in rows]

    def _map_row(self, row: dict[str, Any], tags: list[Tag]) -> Post:
        author_id = UUID(row["author_id"])
        return Post(
            id=UUID(row["id"]),
            title=row["title"],
            slug=row["slug"],
            content=json.loads(row["content"]),
            content_html=row["content_html"],
            cover_image=row["cover_image"],
            published=bool(row["published"]),
            pinned=bool(row["pinned"]),
            published_at=parse_dt(row["published_at"]),
            author_id=author_id,
            author=PostAuthor(id=author_id, name=row["author_name"], role=row["author_role"]),
            tags=tags,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
