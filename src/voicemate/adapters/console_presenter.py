"""Console notification presenter."""

from datetime import datetime

import click


class ConsolePresenter:
    """
    Prints notifications to the terminal.

    Implements NotificationPresenter protocol. Always permitted.
    """

    def present(
        self,
        title: str,
        body: str | None = None,
        tag: str | None = None,
        require_interaction: bool = False,
    ) -> None:
        stamp = datetime.now().strftime("%H:%M")
        suffix = f" [{tag}]" if tag else ""
        click.echo(f"🔔 {stamp} {click.style(title, bold=True)}{suffix}")
        if body:
            click.echo(f"   {body}")
        if require_interaction:
            click.echo("\a", nl=False)

    def request_permission(self) -> bool:
        return True
