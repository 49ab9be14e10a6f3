#!/usr/bin/env python3
"""Interactive chat CLI for the catalog agent service."""

import argparse

import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

STATUS_STYLES = {"complete": "green", "requires_info": "yellow", "error": "red"}


class ChatCLI:
    """Terminal chat against the ``/agents`` API."""

    def __init__(self, base_url: str = "http://localhost:8000", role: str = "product_agent", language: str = "es"):
        self.base_url = base_url.rstrip("/")
        self.role = role
        self.language = language
        self.session_id: str | None = None
        self.console = Console()
        self.client = httpx.Client(timeout=120.0)

    def start(self) -> None:
        """Start the interactive chat session."""
        self.console.print(
            Panel.fit(
                f"[bold blue]Catalog Agent - {self.role}[/bold blue]\n"
                "Type your messages to chat with the agent.\n"
                "Commands: /help, /clear, /quit",
                border_style="blue",
            )
        )

        if not self._test_connection():
            self.console.print(f"[red]Cannot connect to the service at {self.base_url}.[/red]")
            return

        self.console.print("[green]Connected to catalog agent service[/green]\n")

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
                command = user_input.strip().lower()

                if command in ["/quit", "/exit"]:
                    break
                elif command == "/help":
                    self._show_help()
                    continue
                elif command == "/clear":
                    self._clear_session()
                    continue
                elif command == "":
                    continue

                response = self._send_message(user_input)
                if response:
                    self._display_response(response)

        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]Goodbye![/yellow]")
            self.client.close()

    def _test_connection(self) -> bool:
        try:
            response = self.client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _send_message(self, message: str) -> dict | None:
        payload = {"message": message, "role": self.role, "context": {"language": self.language}}
        if self.session_id:
            payload["session_id"] = self.session_id

        try:
            with self.console.status("[dim]Thinking...[/dim]"):
                response = self.client.post(f"{self.base_url}/agents/chat", json=payload)
        except httpx.HTTPError as e:
            self.console.print(f"[red]Connection error: {e}[/red]")
            return None

        if response.status_code != 200:
            self.console.print(f"[red]API Error: {response.status_code} - {response.text}[/red]")
            return None

        data = response.json()
        self.session_id = data.get("session_id")
        return data

    def _clear_session(self) -> None:
        if self.session_id:
            try:
                self.client.delete(f"{self.base_url}/agents/sessions/{self.session_id}")
            except httpx.HTTPError as e:
                self.console.print(f"[red]Could not clear session on the server: {e}[/red]")
        self.session_id = None
        self.console.print("[yellow]Session cleared[/yellow]")

    def _display_response(self, response: dict) -> None:
        status = response.get("status", "complete")
        style = STATUS_STYLES.get(status, "green")

        self.console.print(
            Panel(
                Markdown(response.get("content") or "No response"),
                title=f"[bold {style}]Agent ({status})[/bold {style}]",
                border_style=style,
                padding=(1, 2),
            )
        )

        for action in response.get("suggested_actions") or []:
            self.console.print(f"[dim]Suggested: {action['label']} ({action['action']})[/dim]")
        if response.get("missing_fields"):
            self.console.print(f"[yellow]Missing: {', '.join(response['missing_fields'])}[/yellow]")

    def _show_help(self) -> None:
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /clear - Clear the session on the server and start over
• /quit or /exit - Exit the chat

[bold]Example Conversation:[/bold]
1. "Which categories can I use?"
2. "Find products without a Spanish description"
3. "Show me the details of PRD_002"
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the chat CLI."""
    parser = argparse.ArgumentParser(description="Chat with a catalog agent")
    parser.add_argument("base_url", nargs="?", default="http://localhost:8000")
    parser.add_argument("--role", default="product_agent")
    parser.add_argument("--language", default="es", choices=["es", "en", "it"])
    args = parser.parse_args()

    ChatCLI(args.base_url, role=args.role, language=args.language).start()


if __name__ == "__main__":
    main()
