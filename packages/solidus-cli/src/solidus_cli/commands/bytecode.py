"""solidus strip/decode/compare commands - Bytecode utilities."""

from __future__ import annotations

import click

from solidus_cli.errors import EXIT_USER_ERROR, CLIError, handle_solidus_error
from solidus_cli.output import print_json, report_match


@click.command("strip")
@click.argument("bytecode")
def strip(bytecode: str) -> None:
    """Print BYTECODE without its trailing metadata section.

    Example:

        solidus strip 0x6080...0033
    """
    from solidus_core.bytecode import strip_metadata
    from solidus_core.errors import SolidusError

    try:
        stripped = strip_metadata(bytecode.strip())
    except SolidusError as e:
        handle_solidus_error(e)

    # Plain output so the result can be piped
    click.echo(stripped)


@click.command("decode")
@click.argument("bytecode")
def decode(bytecode: str) -> None:
    """Decode the CBOR metadata appended to BYTECODE.

    Example:

        solidus decode 0x6080...0033
    """
    from solidus_core.bytecode import decode_metadata
    from solidus_core.errors import SolidusError

    try:
        decoded = decode_metadata(bytecode.strip())
    except SolidusError as e:
        handle_solidus_error(e)

    print_json(decoded)


@click.command("compare")
@click.argument("recompiled")
@click.argument("reference", required=False)
@click.option(
    "--rpc-url",
    type=str,
    default=None,
    help="JSON-RPC endpoint to read the reference bytecode from",
)
@click.option(
    "--address",
    type=str,
    default=None,
    help="Contract address whose deployed code is the reference",
)
def compare(
    recompiled: str,
    reference: str | None,
    rpc_url: str | None,
    address: str | None,
) -> None:
    """Compare RECOMPILED bytecode with REFERENCE.

    The reference is given directly or fetched from chain with
    --rpc-url and --address. Exits non-zero when the bytecode does not
    match.

    Examples:

        solidus compare 0x6080... 0x6080...

        solidus compare 0x6080... --rpc-url http://localhost:8545 --address 0xab...
    """
    from solidus_core.bytecode import compare_bytecode
    from solidus_core.errors import SolidusError
    from solidus_core.models import MatchStatus

    if reference is None:
        if not (rpc_url and address):
            raise click.UsageError("Give REFERENCE or both --rpc-url and --address")

        from solidus_core.chain import fetch_deployed_bytecode

        try:
            reference = fetch_deployed_bytecode(rpc_url, address)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--address") from e
        except SolidusError as e:
            handle_solidus_error(e)
    elif rpc_url or address:
        raise click.UsageError("REFERENCE cannot be combined with --rpc-url/--address")

    result = compare_bytecode(recompiled.strip(), reference.strip())
    report_match(result)

    if result.status == MatchStatus.PROBABLY_IMMUTABLES:
        raise CLIError("Bytecode does not match exactly", exit_code=EXIT_USER_ERROR)
    if not result.matched:
        raise CLIError(
            "Recompiled bytecode differs from the reference", exit_code=EXIT_USER_ERROR
        )
