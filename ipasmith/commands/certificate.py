from rich.markup import escape

from ipasmith.logger import get_console
from ipasmith.src.core.cert_handler import compute_fingerprint, ensure_certificate_valid
from ipasmith.src.core.errors import SigningError
from ipasmith.src.utils.config_loader import get_team_id


def run_fingerprint_command(args) -> int:
    """Print the SHA-1 fingerprint of a .p12 certificate"""
    console = get_console()

    if not args.cert_path.exists():
        console.print(f"[red]Error:[/] Certificate not found: {args.cert_path}")
        return 1

    try:
        fingerprint = compute_fingerprint(args.cert_path.read_bytes(), args.password)
    except SigningError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    console.print(fingerprint)
    return 0


def run_validate_cert_command(args, runner=None) -> int:
    """Check the certificate is one of the team's codesigning identities"""
    console = get_console()

    try:
        team_id = args.team_id or get_team_id()
        if not team_id:
            console.print(
                "[red]Error:[/] No team ID given. Pass --team-id or set \\[signing] team_id in the config"
            )
            return 1

        fingerprint = ensure_certificate_valid(
            args.cert_path, args.password, team_id, runner
        )
    except (SigningError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    console.print(f"[green]✓ Trusted identity:[/] {fingerprint}")
    return 0
