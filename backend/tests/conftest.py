"""Shared fixtures.

Environment variables are set before anything from ``notekeeper`` is
imported because ``notekeeper.config`` builds its settings at import time.
"""

import os

os.environ.setdefault("NOTEKEEPER_SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("NOTEKEEPER_SUPABASE_ANON_KEY", "test-anon-key-not-real")
os.environ["NOTEKEEPER_STORE_BACKEND"] = "memory"
os.environ["NOTEKEEPER_LOG_LEVEL"] = "WARNING"

from collections import Counter

import pytest
import pytest_asyncio

from notekeeper.core.ledgers.category import CategoryLedger
from notekeeper.core.ledgers.notepad import NotepadLedger
from notekeeper.core.ledgers.user import UserLedger
from notekeeper.core.repositories.document_store import DocumentStore, collection_name
from notekeeper.core.repositories.implementations.memory.document_store import (
    InMemoryDocumentStore,
)
from notekeeper.core.services.onboarding import OnboardingService
from notekeeper.core.services.orchestrator import ConsistencyOrchestrator
from notekeeper.errors import StoreFailure


class FlakyStore(DocumentStore):
    """Wraps a store, records every call and fails chosen calls on demand.

    ``fail_on("categories", "update", nth=2)`` makes the second categories
    update from now on raise ``StoreFailure``; ``times`` extends the failure to
    the following calls of the same kind.
    """

    def __init__(self, inner: DocumentStore):
        self.inner = inner
        self.calls: list[tuple[str, str]] = []
        self._seen: Counter = Counter()
        self._failing: dict[tuple[str, str], set[int]] = {}

    def fail_on(self, collection, operation, nth=1, times=1):
        key = (collection, operation)
        start = self._seen[key] + nth
        self._failing[key] = set(range(start, start + times))

    def reset_calls(self):
        self.calls.clear()

    def count(self, collection=None, operation=None):
        return sum(
            1
            for c, op in self.calls
            if (collection is None or c == collection) and (operation is None or op == operation)
        )

    def writes(self, collection=None):
        return sum(self.count(collection, op) for op in ("create", "update", "remove"))

    async def _call(self, collection, operation, *args):
        key = (collection_name(collection), operation)
        self.calls.append(key)
        self._seen[key] += 1
        if self._seen[key] in self._failing.get(key, ()):
            raise StoreFailure("Injected failure", collection=key[0], operation=operation)
        return await getattr(self.inner, operation)(collection, *args)

    async def create(self, collection, record):
        return await self._call(collection, "create", record)

    async def find_one(self, collection, filter):
        return await self._call(collection, "find_one", filter)

    async def find(self, collection, filter):
        return await self._call(collection, "find", filter)

    async def update(self, collection, filter, patch):
        return await self._call(collection, "update", filter, patch)

    async def remove(self, collection, filter):
        return await self._call(collection, "remove", filter)


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


@pytest.fixture
def store(memory_store):
    return FlakyStore(memory_store)


@pytest.fixture
def users(store):
    return UserLedger(store)


@pytest.fixture
def categories(store):
    return CategoryLedger(store)


@pytest.fixture
def notepads(store, categories):
    return NotepadLedger(store, categories)


@pytest.fixture
def orchestrator(users, categories, notepads):
    return ConsistencyOrchestrator(users, categories, notepads)


@pytest.fixture
def onboarding(users, categories, notepads):
    return OnboardingService(
        users,
        categories,
        notepads,
        category_name="Sample category",
        notepad_title="Read me",
        notepad_text="Welcome!",
    )


@pytest_asyncio.fixture
async def user(users):
    return await users.create("fb-1001", name="Test User", photo="photourl")


@pytest_asyncio.fixture
async def other_user(users):
    return await users.create("fb-2002", name="Someone Else")


@pytest_asyncio.fixture
async def populated(orchestrator, user, users, store):
    """A user owning one category that holds two notepads, built through the orchestrator."""
    category = await orchestrator.create_category(user.id, "Test category")
    first = await orchestrator.create_notepad(user.id, "Test notepad 1", "Test notepad 1 text", category.id)
    second = await orchestrator.create_notepad(user.id, "Test notepad 2", "Test notepad 2 text", category.id)
    owner = await users.find_by_id(user.id)
    store.reset_calls()
    return {"user": owner, "category": category, "notepads": [first, second]}
