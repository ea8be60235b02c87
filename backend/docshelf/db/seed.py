"""Seed a fresh database with an admin account, starter categories and sample docs.

Idempotent: existing users, categories and documents (matched by email or
slug) are left alone. Run with ``python -m docshelf.db.seed``.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.api.dependencies import hash_password
from docshelf.db.database import create_engine, create_session_factory, dispose_engine
from docshelf.db.models import Role, User
from docshelf.db.repositories import category_repo, document_repo, user_repo
from docshelf.models.document import DocumentCreate
from docshelf.services.document_service import DocumentService
from docshelf.services.redis_client import PageCache

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"

CATEGORIES = [
    {
        "name": "Getting Started",
        "slug": "getting-started",
        "description": "Everything you need to know to get started with our platform",
    },
    {
        "name": "Guides",
        "slug": "guides",
        "description": "Step-by-step guides for common tasks",
    },
    {
        "name": "API Reference",
        "slug": "api-reference",
        "description": "Detailed API documentation for developers",
    },
]

SAMPLE_DOCUMENTS = [
    {
        "title": "Getting Started with Docshelf",
        "slug": "getting-started",
        "subtitle": "Learn how to get started with our documentation platform",
        "category_slug": "getting-started",
        "content": (
            "<h1>Getting Started with Docshelf</h1>"
            "<p>Welcome to Docshelf! This guide will help you get started with the documentation system.</p>"
            "<h2>Writing a document</h2>"
            "<ol><li>Sign in and open the dashboard.</li>"
            "<li>Create a document, pick a category and add tags.</li>"
            "<li>Publish it when it is ready for readers.</li></ol>"
            "<p>Every save keeps a numbered version, so earlier drafts are never lost.</p>"
        ),
    },
    {
        "title": "API Reference",
        "slug": "api-reference",
        "subtitle": "Complete API documentation for developers",
        "category_slug": "api-reference",
        "content": (
            "<h1>API Reference</h1>"
            "<h2>Authentication</h2>"
            "<p>Write requests require a bearer token from <code>POST /api/v1/auth/login</code>.</p>"
            "<h2>Endpoints</h2>"
            "<h3>GET /api/v1/documents</h3><p>Returns a list of documents.</p>"
            "<h3>GET /api/v1/documents/slug/{slug}</h3><p>Returns a specific document by slug.</p>"
            "<h3>POST /api/v1/documents</h3><p>Creates a new document.</p>"
            "<h3>PUT /api/v1/documents/{id}</h3><p>Updates an existing document.</p>"
            "<h3>DELETE /api/v1/documents/{id}</h3><p>Deletes a document.</p>"
        ),
    },
]


async def seed(db: AsyncSession) -> None:
    """Insert whatever part of the starter content is missing."""
    admin = await user_repo.get_user_by_email(db, ADMIN_EMAIL)
    if admin is None:
        admin = await user_repo.create_user(
            db,
            User(
                name="Admin User",
                email=ADMIN_EMAIL,
                password_hash=hash_password(ADMIN_PASSWORD),
                role=Role.ADMIN,
            ),
        )
        await db.commit()
        logger.info("Admin user created")

    for data in CATEGORIES:
        if await category_repo.get_category_by_slug(db, data["slug"]) is None:
            await category_repo.create_category(db, data["name"], data["slug"], data["description"])
            await db.commit()
            logger.info(f"Category {data['name']} created")

    # No Redis here; nothing is cached yet
    documents = DocumentService(db, PageCache(None, enabled=False))
    for sample in SAMPLE_DOCUMENTS:
        if await document_repo.slug_taken(db, sample["slug"]):
            continue
        category = await category_repo.get_category_by_slug(db, sample["category_slug"])
        await documents.create(
            DocumentCreate(
                title=sample["title"],
                slug=sample["slug"],
                subtitle=sample["subtitle"],
                content=sample["content"],
                published=True,
                category_id=category.id if category else None,
            ),
            author_id=admin.id,
        )
        logger.info(f"Document {sample['title']} created")


async def main() -> None:
    engine = create_engine()
    try:
        async with create_session_factory(engine)() as session:
            await seed(session)
    finally:
        await dispose_engine(engine)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    asyncio.run(main())
