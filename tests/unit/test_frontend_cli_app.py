"""Unit tests for the LumenBox Textual App (Frontend)."""

import pyperclip
import pytest
from unittest.mock import MagicMock, patch

from lumenbox.core.config import Settings
from lumenbox.core.storage import SecretStorage
from lumenbox.core.vault import SecretVault
from lumenbox.frontend.cli.app import (
    DeleteConfirmModal,
    LumenBoxApp,
    NewSecretModal,
    NewWalletModal,
    PasswordModal,
    SecretItem,
)
from lumenbox.frontend.cli.context import AppContext
from lumenbox.security import envelope


# --- Fixtures ---

@pytest.fixture
def mock_context(tmp_path):
    """AppContext with a real vault in tmp_path and a fake wallet."""
    vault = SecretVault(SecretStorage(tmp_path), time_cost=1, memory_cost=8, parallelism=1)
    wallet = MagicMock()
    wallet.generate_mnemonic.return_value = "seed words"
    wallet.derive_account.return_value.secret.return_value = "SABC"
    wallet.derive_account.return_value.public_key.return_value = "GABC"
    return AppContext(settings=Settings(home=tmp_path), vault=vault, wallet=wallet)


# --- Test 1: Startup ---

@pytest.mark.asyncio
async def test_app_startup_lists_secrets(mock_context):
    mock_context.vault.encrypt_and_save("pw", "one", "mnemonic")
    mock_context.vault.encrypt_and_save("pw", "two", "privateKey")

    app = LumenBoxApp(ctx=mock_context)
    async with app.run_test() as pilot:
        await pilot.pause()
        items = list(app.query_one("#secrets").query(SecretItem))
        assert [item.secret_name for item in items] == ["mnemonic", "privateKey"]
        assert app.selected_name == "mnemonic"


# --- Test 2: New secret ---

@pytest.mark.asyncio
async def test_new_secret_action(mock_context):
    app = LumenBoxApp(ctx=mock_context)

    async with app.run_test() as pilot:
        await pilot.press("n")
        await pilot.pause()
        assert isinstance(app.screen, NewSecretModal)

        app.screen.name_input.value = "mnemonic"
        app.screen.secret_input.value = "test seed phrase content"
        app.screen.password_input.value = "qwerty"
        app.screen.confirm_input.value = "qwerty"
        app.screen._submit()
        await pilot.pause()

        assert not isinstance(app.screen, NewSecretModal)
        assert mock_context.vault.load_and_decrypt("qwerty", "mnemonic") == b"test seed phrase content"
        assert app.selected_name == "mnemonic"


@pytest.mark.asyncio
async def test_new_secret_password_mismatch_keeps_modal(mock_context):
    app = LumenBoxApp(ctx=mock_context)

    async with app.run_test() as pilot:
        await pilot.press("n")
        await pilot.pause()
        app.screen.name_input.value = "k"
        app.screen.secret_input.value = "s"
        app.screen.password_input.value = "one"
        app.screen.confirm_input.value = "two"
        app.screen._submit()
        await pilot.pause()

        assert isinstance(app.screen, NewSecretModal)
        assert mock_context.vault.list_secrets() == []


# --- Test 3: Open secret ---

@pytest.mark.asyncio
async def test_open_secret_copies_to_clipboard(mock_context):
    mock_context.vault.encrypt_and_save("qwerty", "test seed phrase content", "mnemonic")
    app = LumenBoxApp(ctx=mock_context)

    with patch("lumenbox.frontend.cli.app.copy_to_clipboard") as copy:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("o")
            await pilot.pause()
            assert isinstance(app.screen, PasswordModal)

            app.screen.password_input.value = "qwerty"
            app.screen._submit()
            await pilot.pause()

    copy.assert_called_once_with("test seed phrase content")


@pytest.mark.asyncio
async def test_open_secret_wrong_password_does_not_copy(mock_context):
    mock_context.vault = SecretVault(
        mock_context.vault.storage, container_format="sealed", time_cost=1, memory_cost=8, parallelism=1
    )
    mock_context.vault.encrypt_and_save("qwerty", "seed", "mnemonic")
    app = LumenBoxApp(ctx=mock_context)

    with patch("lumenbox.frontend.cli.app.copy_to_clipboard") as copy:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("o")
            await pilot.pause()
            app.screen.password_input.value = "wrong"
            app.screen._submit()
            await pilot.pause()

    copy.assert_not_called()


@pytest.mark.asyncio
async def test_open_without_selection_does_nothing(mock_context):
    app = LumenBoxApp(ctx=mock_context)
    async with app.run_test() as pilot:
        await pilot.press("o")
        await pilot.pause()
        assert not isinstance(app.screen, PasswordModal)


# --- Test 4: Wallet, delete, clipboard ---

@pytest.mark.asyncio
async def test_new_wallet_action(mock_context):
    app = LumenBoxApp(ctx=mock_context)

    async with app.run_test() as pilot:
        await pilot.press("w")
        await pilot.pause()
        assert isinstance(app.screen, NewWalletModal)

        app.screen.name_input.value = "main"
        app.screen.password_input.value = "pw"
        app.screen.confirm_input.value = "pw"
        app.screen._submit()
        await pilot.pause()

    assert mock_context.vault.list_secrets() == ["main-mnemonic", "main-secret"]
    assert mock_context.vault.load_and_decrypt("pw", "main-secret") == b"SABC"


@pytest.mark.asyncio
async def test_delete_secret_action(mock_context):
    mock_context.vault.encrypt_and_save("pw", "x", "old")
    app = LumenBoxApp(ctx=mock_context)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("d")
        await pilot.pause()
        assert isinstance(app.screen, DeleteConfirmModal)

        app.screen.dismiss(True)
        await pilot.pause()

    assert mock_context.vault.list_secrets() == []


@pytest.mark.asyncio
async def test_migrate_action(mock_context):
    mock_context.vault.encrypt_and_save("pw", "seed", "mnemonic")
    app = LumenBoxApp(ctx=mock_context)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("m")
        await pilot.pause()
        app.screen.password_input.value = "pw"
        app.screen._submit()
        await pilot.pause()

    assert mock_context.vault.describe("mnemonic")["format"] == "sealed"
    assert mock_context.vault.load_and_decrypt("pw", "mnemonic") == b"seed"


@pytest.mark.asyncio
async def test_clear_clipboard_action(mock_context):
    app = LumenBoxApp(ctx=mock_context)
    with patch("lumenbox.frontend.cli.app.clear_clipboard") as clear:
        async with app.run_test() as pilot:
            await pilot.press("x")
            await pilot.pause()
    clear.assert_called_once_with()


@pytest.mark.asyncio
async def test_new_secret_empty_password_keeps_modal(mock_context):
    app = LumenBoxApp(ctx=mock_context)

    async with app.run_test() as pilot:
        await pilot.press("n")
        await pilot.pause()
        app.screen.name_input.value = "k"
        app.screen.secret_input.value = "s"
        app.screen._submit()
        await pilot.pause()

        assert isinstance(app.screen, NewSecretModal)
        assert mock_context.vault.list_secrets() == []


@pytest.mark.asyncio
async def test_open_secret_undecodable_plaintext_does_not_copy(mock_context, monkeypatch):
    mock_context.vault.encrypt_and_save("qwerty", "seed", "mnemonic")
    monkeypatch.setattr(envelope, "decrypt", lambda *args, **kwargs: b"\xff\xfe")
    app = LumenBoxApp(ctx=mock_context)

    with patch("lumenbox.frontend.cli.app.copy_to_clipboard") as copy:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("o")
            await pilot.pause()
            app.screen.password_input.value = "wrong"
            app.screen._submit()
            await pilot.pause()

    copy.assert_not_called()


@pytest.mark.asyncio
async def test_open_secret_without_clipboard_keeps_running(mock_context):
    mock_context.vault.encrypt_and_save("qwerty", "seed", "mnemonic")
    app = LumenBoxApp(ctx=mock_context)
    no_clipboard = pyperclip.PyperclipException("no clipboard")

    with patch("lumenbox.frontend.cli.app.copy_to_clipboard", side_effect=no_clipboard) as copy:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("o")
            await pilot.pause()
            app.screen.password_input.value = "qwerty"
            app.screen._submit()
            await pilot.pause()
            assert not isinstance(app.screen, PasswordModal)

    copy.assert_called_once_with("seed")


@pytest.mark.asyncio
async def test_clear_clipboard_without_clipboard_keeps_running(mock_context):
    app = LumenBoxApp(ctx=mock_context)
    no_clipboard = pyperclip.PyperclipException("no clipboard")

    with patch("lumenbox.frontend.cli.app.clear_clipboard", side_effect=no_clipboard) as clear:
        async with app.run_test() as pilot:
            await pilot.press("x")
            await pilot.pause()

    clear.assert_called_once_with()


@pytest.mark.asyncio
async def test_migrate_undecodable_plaintext_keeps_container(mock_context, monkeypatch):
    mock_context.vault.encrypt_and_save("pw", "seed", "mnemonic")
    before = mock_context.vault.storage.read("mnemonic")
    monkeypatch.setattr(envelope, "decrypt", lambda *args, **kwargs: b"\xff\xfe")
    app = LumenBoxApp(ctx=mock_context)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("m")
        await pilot.pause()
        app.screen.password_input.value = "wrong"
        app.screen._submit()
        await pilot.pause()

    assert mock_context.vault.storage.read("mnemonic") == before
