import logging
import math

import click

from exprcalc.parser import format_tree
from exprcalc.runtime import build_tree, evaluate_tree
from exprcalc.utils import CalcError


def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def is_exit_command(line: str) -> bool:
    return line.startswith("q") or line.startswith("exit")


@click.command()
@click.option("--prompt", default=">>> ", show_default=True, help="Prompt shown before each input line.")
@click.option("--tree/--no-tree", default=False, help="Print the parsed expression tree before its value.")
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    envvar="EXPRCALC_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
def main(prompt: str, tree: bool, log_level: str) -> None:
    """Interactive arithmetic calculator. Type q or exit to leave."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    while True:
        try:
            code = input(prompt)
        except EOFError:
            break

        if is_exit_command(code):
            break

        try:
            expression_tree = build_tree(code)
            if tree:
                click.echo(format_tree(expression_tree))
            result = evaluate_tree(expression_tree)
        except CalcError as e:
            click.echo(f"Error happened: {e}")
            excerpt = e.excerpt(code)
            if excerpt:
                click.echo(excerpt)
            continue

        click.echo(f"<<< {format_number(result)}")


if __name__ == "__main__":
    main()
