"""Click classes whose commands answer ``--examples``.

``--help`` stays short; ``--examples`` prints a few ready-to-paste
invocations and exits without opening the ledger.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click


class _ExamplesMixin:
    """Adds an eager ``--examples`` option when the command has example text."""

    params: list[click.Parameter]

    def _attach_examples(self, examples: str | None) -> None:
        self.examples = textwrap.dedent(examples).strip() if examples else None
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._print_examples,
                    help="Show usage examples and exit.",
                )
            )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(textwrap.indent(self.examples or "", "  "))
        ctx.exit(0)


class InvoiceCommand(_ExamplesMixin, click.Command):
    """Command accepting an ``examples=`` keyword."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._attach_examples(examples)


class InvoiceGroup(_ExamplesMixin, click.Group):
    """Group accepting ``examples=``; its subcommands default to :class:`InvoiceCommand`."""

    command_class = InvoiceCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._attach_examples(examples)
