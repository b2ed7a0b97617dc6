"""Tests for the request-scoped API key identity."""

import asyncio

from api_key_core.context.api_key_context import ApiKeyContext, api_key_identity


class TestApiKeyContext:
    """Test identity set/reset semantics."""

    def test_empty_by_default(self):
        assert ApiKeyContext.get_current_owner() is None
        assert ApiKeyContext.get_current_key_type() is None

    def test_set_and_reset(self):
        tokens = ApiKeyContext.set_identity("alice", 0)
        assert ApiKeyContext.get_current_owner() == "alice"
        assert ApiKeyContext.get_current_key_type() == 0

        ApiKeyContext.reset(tokens)
        assert ApiKeyContext.get_current_owner() is None

    def test_identity_context_manager_restores_previous(self):
        with api_key_identity("alice", 0):
            with api_key_identity("bob", 1):
                assert ApiKeyContext.get_current_owner() == "bob"
                assert ApiKeyContext.get_current_key_type() == 1
            assert ApiKeyContext.get_current_owner() == "alice"
        assert ApiKeyContext.get_current_owner() is None

    def test_identity_restored_on_exception(self):
        try:
            with api_key_identity("alice", 0):
                raise RuntimeError("handler failed")
        except RuntimeError:
            pass
        assert ApiKeyContext.get_current_owner() is None

    def test_concurrent_tasks_are_isolated(self):
        """Each task sees only the identity it set."""

        async def handle(owner):
            with api_key_identity(owner, 0):
                await asyncio.sleep(0.01)
                return ApiKeyContext.get_current_owner()

        async def run_all():
            return await asyncio.gather(*(handle(name) for name in ("alice", "bob", "carol")))

        assert asyncio.run(run_all()) == ["alice", "bob", "carol"]
