"""Prepopulation and its compensation path."""

from uuid import uuid4

import pytest

from notekeeper.errors import NotFound, StoreFailure, ValidationFailure


class TestPrepopulate:

    @pytest.mark.asyncio
    async def test_fresh_user_gets_sample_category_and_notepad(self, onboarding, user, users, categories, notepads):
        result = await onboarding.prepopulate(user.id)

        assert result.category.name == "Sample category"
        assert result.category.notepads_count == 1
        assert result.notepad.title == "Read me"
        assert result.notepad.category == result.category.id
        assert result.notepad.user == user.id
        assert result.user.categories == [result.category.id]
        assert result.user.notepads == [result.notepad.id]

        assert len(await categories.get_by_user_id(user.id)) == 1
        assert len(await notepads.get_by_user_id(user.id)) == 1
        stored = await users.find_by_id(user.id)
        assert stored.categories == [result.category.id]

    @pytest.mark.asyncio
    async def test_invalid_user_id(self, onboarding, store):
        with pytest.raises(ValidationFailure):
            await onboarding.prepopulate(None)
        with pytest.raises(ValidationFailure):
            await onboarding.prepopulate("nope")
        assert store.count() == 0

    @pytest.mark.asyncio
    async def test_unknown_user(self, onboarding, store):
        with pytest.raises(NotFound):
            await onboarding.prepopulate(uuid4())
        assert store.writes() == 0

    @pytest.mark.asyncio
    async def test_failure_after_category_creation_is_undone(self, onboarding, user, users, categories, store):
        store.fail_on("users", "update")

        with pytest.raises(StoreFailure):
            await onboarding.prepopulate(user.id)

        assert await categories.get_by_user_id(user.id) == []
        restored = await users.find_by_id(user.id)
        assert restored.categories == user.categories
        assert restored.notepads == user.notepads

    @pytest.mark.asyncio
    async def test_failure_after_notepad_creation_is_undone(self, onboarding, users, categories, notepads, store):
        existing = await users.create("fb-3003", name="Has history")
        prior_category, prior_notepad = uuid4(), uuid4()
        await users.restore_sets(existing.id, [prior_category], [prior_notepad])
        store.fail_on("users", "update", nth=2)

        with pytest.raises(StoreFailure):
            await onboarding.prepopulate(existing.id)

        assert await categories.get_by_user_id(existing.id) == []
        assert await notepads.get_by_user_id(existing.id) == []
        restored = await users.find_by_id(existing.id)
        assert restored.categories == [prior_category]
        assert restored.notepads == [prior_notepad]

    @pytest.mark.asyncio
    async def test_compensation_runs_newest_first(self, onboarding, user, store):
        store.fail_on("categories", "update")
        store.reset_calls()

        with pytest.raises(StoreFailure):
            await onboarding.prepopulate(user.id)

        tail = [c for c in store.calls if c[1] in ("remove", "update")][-3:]
        assert tail == [("notepads", "remove"), ("categories", "remove"), ("users", "update")]

    @pytest.mark.asyncio
    async def test_failed_undo_does_not_mask_original_error(self, onboarding, user, notepads, store):
        store.fail_on("categories", "update")
        store.fail_on("notepads", "remove")

        with pytest.raises(StoreFailure) as excinfo:
            await onboarding.prepopulate(user.id)

        assert excinfo.value.collection == "categories"
        assert excinfo.value.operation == "update"
        # the notepad undo failed and is not retried: the welcome notepad survives
        assert len(await notepads.get_by_user_id(user.id)) == 1
        assert store.count("notepads", "remove") == 1

    @pytest.mark.asyncio
    async def test_failure_creating_category_only_restores_user(self, onboarding, user, users, store):
        store.fail_on("categories", "create")
        store.reset_calls()

        with pytest.raises(StoreFailure):
            await onboarding.prepopulate(user.id)

        assert store.count("categories", "remove") == 0
        assert store.count("notepads", "remove") == 0
        assert store.count("users", "update") == 1
        assert (await users.find_by_id(user.id)).categories == []


class TestOnboard:

    @pytest.mark.asyncio
    async def test_first_sight_creates_and_prepopulates(self, onboarding, users):
        account = await onboarding.onboard("fb-new", name="New Person", photo="p.png")

        assert account.provider_id == "fb-new"
        assert account.name == "New Person"
        assert len(account.categories) == 1
        assert len(account.notepads) == 1
        assert (await users.find_by_provider_id("fb-new")).id == account.id

    @pytest.mark.asyncio
    async def test_returning_user_is_not_prepopulated_again(self, onboarding, store):
        first = await onboarding.onboard("fb-again")
        store.reset_calls()

        second = await onboarding.onboard("fb-again")

        assert second.id == first.id
        assert second.categories == first.categories
        assert store.writes() == 0

    @pytest.mark.asyncio
    async def test_prepopulation_failure_still_yields_account(self, onboarding, categories, store):
        store.fail_on("notepads", "create")

        account = await onboarding.onboard("fb-unlucky")

        assert account.provider_id == "fb-unlucky"
        assert account.categories == []
        assert await categories.get_by_user_id(account.id) == []
