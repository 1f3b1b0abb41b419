"""Textual app for LumenBox.

Start here with `python -m lumenbox.frontend.cli.app`
"""

from __future__ import annotations

from typing import Optional

import pyperclip
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Static,
)

from lumenbox.core.exceptions import LumenBoxError
from lumenbox.frontend.cli.clipboard import clear_clipboard, copy_to_clipboard
from lumenbox.frontend.cli.context import (
    AppContext,
    build_context,
    create_wallet,
    migrate_secret,
    open_secret,
)


# === Modal definitions ===


class NewSecretResult:
    def __init__(self, name: str, secret: str, password: str):
        self.name = name
        self.secret = secret
        self.password = password


class NewSecretModal(ModalScreen[Optional[NewSecretResult]]):
    """Collect a name, the secret itself and a confirmed password."""

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static("New Secret", classes="title")
            yield Label("Name (stored as <name>.enc)")
            self.name_input = Input(placeholder="mnemonic")
            yield self.name_input
            yield Label("Secret (seed phrase or private key)")
            self.secret_input = Input(placeholder="••••••", password=True)
            yield self.secret_input
            yield Label("Password")
            self.password_input = Input(placeholder="••••••", password=True)
            yield self.password_input
            yield Label("Confirm Password")
            self.confirm_input = Input(placeholder="••••••", password=True)
            yield self.confirm_input
            with Horizontal():
                yield Button("Cancel", id="cancel")
                yield Button("Encrypt & Save", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.name_input)

    def _submit(self) -> None:
        name = (self.name_input.value or "").strip()
        secret = self.secret_input.value or ""
        password = self.password_input.value or ""
        if not name:
            self.app.notify("Name cannot be empty", severity="error")
            return
        if not secret:
            self.app.notify("Secret cannot be empty", severity="error")
            return
        if not password:
            self.app.notify("Password cannot be empty", severity="error")
            return
        if password != (self.confirm_input.value or ""):
            self.app.notify("Passwords do not match", severity="error")
            return
        self.dismiss(NewSecretResult(name=name, secret=secret, password=password))

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class PasswordModal(ModalScreen[Optional[str]]):
    """Ask for the password of one container."""

    def __init__(self, prompt: str):
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static(self.prompt, classes="title")
            yield Label("Password")
            self.password_input = Input(placeholder="••••••", password=True)
            yield self.password_input
            with Horizontal():
                yield Button("Cancel", id="cancel")
                yield Button("Unlock (Enter)", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.password_input)

    def _submit(self) -> None:
        self.dismiss(self.password_input.value or "")

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)
        elif event.key == "enter":
            self._submit()


class NewWalletResult:
    def __init__(self, name: str, password: str):
        self.name = name
        self.password = password


class NewWalletModal(ModalScreen[Optional[NewWalletResult]]):
    """Name and password for a freshly generated wallet."""

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static("New Wallet", classes="title")
            yield Label("Saves <name>-mnemonic and <name>-secret")
            yield Label("Wallet name")
            self.name_input = Input(placeholder="wallet", value="wallet")
            yield self.name_input
            yield Label("Password")
            self.password_input = Input(placeholder="••••••", password=True)
            yield self.password_input
            yield Label("Confirm Password")
            self.confirm_input = Input(placeholder="••••••", password=True)
            yield self.confirm_input
            with Horizontal():
                yield Button("Cancel", id="cancel")
                yield Button("Create", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.password_input)

    def _submit(self) -> None:
        name = (self.name_input.value or "").strip()
        password = self.password_input.value or ""
        if not name:
            self.app.notify("Name cannot be empty", severity="error")
            return
        if not password:
            self.app.notify("Password cannot be empty", severity="error")
            return
        if password != (self.confirm_input.value or ""):
            self.app.notify("Passwords do not match", severity="error")
            return
        self.dismiss(NewWalletResult(name=name, password=password))

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class DeleteConfirmModal(ModalScreen[Optional[bool]]):
    def __init__(self, prompt: str):
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:  # pragma: no cover
        with Vertical(classes="dialog"):
            yield Static(self.prompt)
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("Delete (Enter)", id="ok", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        self.dismiss(event.button.id == "ok")

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(False)
        elif event.key == "enter":
            self.dismiss(True)


class SecretItem(ListItem):
    def __init__(self, name: str):
        super().__init__(Static(name))
        self.secret_name = name


class LumenBoxApp(App):
    """List stored containers; encrypt, open, migrate and delete them."""

    TITLE = "LumenBox"

    CSS = """
    #main { border: heavy $surface; }
    .title { padding: 1 1; text-style: bold; }
    #status { padding: 0 1 1 1; height: 3; color: $text-muted; }
    ModalScreen { align: center middle; background: rgba(0,0,0,0.45); }
    .dialog { width: 75%; height: 75%; padding: 1; border: heavy $surface; background: $boost; }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("n", "new_secret", "New Secret"),
        ("o", "open_secret", "Copy Secret"),
        ("w", "new_wallet", "New Wallet"),
        ("m", "migrate_secret", "Migrate"),
        ("d", "delete_secret", "Delete"),
        ("x", "clear_clipboard", "Clear Clipboard"),
    ]

    def __init__(self, ctx: AppContext | None = None):
        self.ctx = ctx or build_context()
        super().__init__()

        self.secrets: ListView | None = None
        self.status: Static | None = None
        self.selected_name: str | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="main"):
            yield Static("Secrets", classes="title")
            self.secrets = ListView(id="secrets")
            yield self.secrets
            self.status = Static("", id="status")
            yield self.status
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_secrets()

    def _set_status(self, message: str) -> None:
        if self.status is not None:
            self.status.update(message)

    def refresh_secrets(self) -> None:
        assert self.secrets is not None
        self.secrets.clear()
        try:
            names = self.ctx.vault.list_secrets()
        except OSError as exc:  # pragma: no cover - UI only
            self._set_status(f"Error loading secrets: {exc}")
            return

        for name in names:
            self.secrets.append(SecretItem(name))
        if self.selected_name not in names:
            self.selected_name = names[0] if names else None
        self._set_status(
            f"{len(names)} secret(s) | new containers: {self.ctx.settings.container_format}"
        )

    @on(ListView.Highlighted, "#secrets")
    def _on_secret_highlighted(self, event: ListView.Highlighted) -> None:
        if isinstance(event.item, SecretItem):
            self.selected_name = event.item.secret_name

    def _require_selection(self) -> str | None:
        if not self.selected_name:
            self.notify("No secret selected", severity="warning")
        return self.selected_name

    # === Actions ===

    def action_refresh(self) -> None:
        self.refresh_secrets()

    def action_new_secret(self) -> None:
        self.push_screen(NewSecretModal(), self._handle_new_secret)

    def _handle_new_secret(self, result: Optional[NewSecretResult]) -> None:
        if not result:
            return
        try:
            self.ctx.vault.encrypt_and_save(result.password, result.secret, result.name)
        except (LumenBoxError, OSError) as exc:
            self.notify(f"Could not save {result.name}: {exc}", severity="error")
            return
        self.selected_name = result.name
        self.notify(f"Saved {result.name}")
        self.refresh_secrets()

    def action_open_secret(self) -> None:
        name = self._require_selection()
        if name is None:
            return
        self.push_screen(
            PasswordModal(f"Unlock {name}"),
            lambda password: self._handle_open_secret(name, password),
        )

    def _handle_open_secret(self, name: str, password: Optional[str]) -> None:
        if password is None:
            return
        try:
            secret = open_secret(self.ctx, password, name)
        except (LumenBoxError, OSError) as exc:
            self.notify(f"Could not open {name}: {exc}", severity="error")
            return
        try:
            copy_to_clipboard(secret)
        except pyperclip.PyperclipException:
            self.notify("Could not copy to clipboard", severity="error")
            return
        self.notify(f"{name} copied to clipboard (x clears it)")

    def action_new_wallet(self) -> None:
        self.push_screen(NewWalletModal(), self._handle_new_wallet)

    def _handle_new_wallet(self, result: Optional[NewWalletResult]) -> None:
        if not result:
            return
        try:
            public_key = create_wallet(self.ctx, result.password, result.name)
        except (LumenBoxError, OSError, ValueError) as exc:
            self.notify(f"Could not create wallet: {exc}", severity="error")
            return
        self.notify(f"Wallet {result.name} created: {public_key}")
        self.refresh_secrets()

    def action_migrate_secret(self) -> None:
        name = self._require_selection()
        if name is None:
            return
        self.push_screen(
            PasswordModal(f"Migrate {name} to the sealed format"),
            lambda password: self._handle_migrate_secret(name, password),
        )

    def _handle_migrate_secret(self, name: str, password: Optional[str]) -> None:
        if password is None:
            return
        try:
            migrated = migrate_secret(self.ctx, password, name)
        except (LumenBoxError, OSError) as exc:
            self.notify(f"Could not migrate {name}: {exc}", severity="error")
            return
        self.notify(f"{name} migrated" if migrated else f"{name} is already sealed")

    def action_delete_secret(self) -> None:
        name = self._require_selection()
        if name is None:
            return
        self.push_screen(
            DeleteConfirmModal(f"Delete '{name}'? This cannot be undone."),
            lambda confirmed: self._handle_delete_secret(name, confirmed),
        )

    def _handle_delete_secret(self, name: str, confirmed: Optional[bool]) -> None:
        if not confirmed:
            return
        try:
            self.ctx.vault.delete_secret(name)
        except OSError as exc:
            self.notify(f"Could not delete {name}: {exc}", severity="error")
            return
        self.selected_name = None
        self.refresh_secrets()

    def action_clear_clipboard(self) -> None:
        try:
            clear_clipboard()
        except pyperclip.PyperclipException:
            self.notify("Could not clear the clipboard", severity="error")
            return
        self.notify("Clipboard cleared")


def main() -> None:  # pragma: no cover - UI only
    LumenBoxApp().run()


if __name__ == "__main__":  # pragma: no cover
    main()
