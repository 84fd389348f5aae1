# CLI interface for ccswitch
import argparse
import getpass
import logging
import subprocess
import sys

from ccswitch import __version__
from ccswitch.config import get_config_dir, get_config_path
from ccswitch.manager import ConfigManager, DeleteReport
from ccswitch.models import (
    ConfigSummary,
    InvalidArgumentError,
    ListedProfile,
    Profile,
    ProfileNotFoundError,
    RemoteError,
)
from ccswitch.platforms import DEFAULT_PLATFORM
from ccswitch.quickset import quick_set
from ccswitch.utils.webdav import (
    WEBDAV_FILENAME,
    MirrorConfig,
    SyncFile,
    WebDAVClient,
    default_sync_files,
    download_files,
    get_webdav_path,
    load_mirror_config,
    save_mirror_config,
    upload_files,
    with_extra_files,
)
from ccswitch.utils.webhook import (
    EVENT_SWITCH,
    EVENT_WEBDAV_SYNC,
    EVENTS,
    FORMATS,
    Notifier,
    add_webhook,
    list_webhooks,
    remove_webhook,
)

logger = logging.getLogger(__name__)

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = invalid argument / not found, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3


def build_manager() -> ConfigManager:
    """Manager wired to the default store, adapters and webhook notifier."""
    return ConfigManager(notifier=Notifier())


def _summary(manager: ConfigManager, profile: Profile) -> ConfigSummary:
    name = manager.registry.validate(profile.platform)
    if name is None:
        return ConfigSummary()
    return manager.registry.get(name).get_config_summary(profile)


def _format_listed(manager: ConfigManager, item: ListedProfile) -> str:
    summary = _summary(manager, item.profile)
    line = f"  {item.index}. {item.display_name}  {summary.masked_key}  {summary.url}"
    if item.is_current:
        line += "  (current)"
    return line


def _print_profile(manager: ConfigManager, profile: Profile) -> None:
    summary = _summary(manager, profile)
    print(f"  Name:     {profile.name}")
    print(f"  Platform: {profile.platform}")
    print(f"  API key:  {summary.masked_key}")
    print(f"  URL:      {summary.url}")


def _confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ").strip().lower()
    except EOFError:
        return False
    return answer in ("y", "yes")


def _print_delete_report(report: DeleteReport) -> None:
    for profile in report.deleted:
        print(f"  Deleted '{profile.name}' [{profile.platform}]")
    for platform in report.cleared_platforms:
        print(f"  Cleared live {platform} credentials")


def cmd_list(args: argparse.Namespace) -> int:
    """Execute list command.

    ABOUTME: Prints the numbered listing, then prompts for a profile to activate
    ABOUTME: Empty input cancels; picking the current profile is a no-op
    """
    try:
        manager = build_manager()
        listing = manager.list_all(args.platform)

        if not listing:
            print("No profiles found. Use 'ccs add <alias> <key> <url>' to add one.")
            return EXIT_SUCCESS

        print("Profiles:")
        for item in listing:
            print(_format_listed(manager, item))
        print()

        try:
            choice = input("Select a profile number (Enter to cancel): ").strip()
        except EOFError:
            choice = ""

        if not choice:
            print("Cancelled.")
            return EXIT_SUCCESS

        if not choice.isdigit() or not 1 <= int(choice) <= len(listing):
            print(f"Error: Invalid selection '{choice}', expected 1-{len(listing)}")
            return EXIT_CONFIG_ERROR

        item = listing[int(choice) - 1]
        if item.is_current:
            print(f"'{item.profile.name}' is already the current profile.")
            return EXIT_SUCCESS

        if not manager.activate(item.profile):
            print(f"Fatal error: Failed to activate '{item.profile.name}'")
            return EXIT_FATAL

        print(f"Switched to {item.display_name}")
        return EXIT_SUCCESS

    except InvalidArgumentError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_use(args: argparse.Namespace) -> int:
    """Execute use command: activate by 1-based index."""
    try:
        manager = build_manager()
        profile = manager.activate_by_index(args.index, args.platform)
        print(f"Switched to {profile.name} [{profile.platform}]")
        return EXIT_SUCCESS
    except (ProfileNotFoundError, InvalidArgumentError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_current(args: argparse.Namespace) -> int:
    """Execute current command.

    ABOUTME: With -p shows one platform, otherwise every platform independently
    """
    try:
        manager = build_manager()

        if args.platform:
            adapter = manager.registry.get(args.platform)
            profile = adapter.get_current_config()
            if profile is None:
                print(f"No active {adapter.display_name} profile.")
                return EXIT_SUCCESS
            print(f"Current {adapter.display_name} profile:")
            _print_profile(manager, profile)
            return EXIT_SUCCESS

        current = manager.get_current_by_platform()
        for name, profile in current.items():
            label = manager.registry.get(name).display_name
            if profile is None:
                print(f"{label}: no active profile")
                continue
            print(f"{label}:")
            _print_profile(manager, profile)
        return EXIT_SUCCESS

    except InvalidArgumentError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_add(args: argparse.Namespace) -> int:
    """Execute add command (default platform: claude)."""
    try:
        manager = build_manager()
        profile = manager.add(args.alias, args.key, args.url, platform=args.platform)
        label = manager.registry.get(profile.platform).display_name
        print(f"Added profile '{profile.name}' [{label}]")
        return EXIT_SUCCESS
    except InvalidArgumentError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def _parse_selection(raw: str, count: int) -> list[int]:
    """Parse '1, 3,4' into sorted unique 1-based indices.

    Raises:
        InvalidArgumentError: On a non-number or out-of-range entry
    """
    indices: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= count:
            raise InvalidArgumentError(f"Invalid selection '{part}', expected 1-{count}")
        indices.add(int(part))
    return sorted(indices)


def cmd_delete(args: argparse.Namespace) -> int:
    """Execute delete command.

    ABOUTME: With an identifier deletes one profile (by index or name)
    ABOUTME: Without one, prompts for comma-separated numbers
    """
    try:
        manager = build_manager()

        if args.identifier:
            profiles = [manager.resolve(args.identifier, args.platform)]
        else:
            listing = manager.list_all(args.platform)
            if not listing:
                print("No profiles found.")
                return EXIT_SUCCESS

            print("Profiles:")
            for item in listing:
                print(_format_listed(manager, item))
            print()

            try:
                raw = input("Numbers to delete, comma separated (Enter to cancel): ").strip()
            except EOFError:
                raw = ""
            indices = _parse_selection(raw, len(listing))
            if not indices:
                print("Cancelled.")
                return EXIT_SUCCESS
            profiles = [listing[i - 1].profile for i in indices]

        names = ", ".join(f"'{p.name}' [{p.platform}]" for p in profiles)
        if not args.yes and not _confirm(f"Delete {names}?"):
            print("Cancelled.")
            return EXIT_SUCCESS

        report = manager.delete_many(profiles)
        _print_delete_report(report)
        return EXIT_SUCCESS

    except (ProfileNotFoundError, InvalidArgumentError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_platforms(args: argparse.Namespace) -> int:
    """Execute platforms command."""
    manager = build_manager()
    print("Supported platforms:")
    for info in manager.registry.platform_info():
        default = " (default)" if info["name"] == DEFAULT_PLATFORM else ""
        print(f"  {info['name']:<8} {info['display_name']:<8} {info['config_dir']}{default}")
    return EXIT_SUCCESS


def open_path_command(path: str) -> list[str]:
    """Platform-specific command that opens a file or directory."""
    if sys.platform == "darwin":
        return ["open", path]
    if sys.platform.startswith("win"):
        return ["cmd", "/c", "start", "", path]
    return ["xdg-open", path]


def cmd_open(args: argparse.Namespace) -> int:
    """Execute open command: the store file (api) or its directory (dir)."""
    path = get_config_dir() if args.target == "dir" else get_config_path()
    if not path.exists():
        print(f"Error: {path} does not exist yet")
        return EXIT_CONFIG_ERROR

    try:
        subprocess.run(open_path_command(str(path)), check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug(f"Open command failed: {e}")
        print(f"Could not open automatically. Path: {path}")
        return EXIT_PARTIAL

    print(f"Opened {path}")
    return EXIT_SUCCESS


def cmd_set(args: argparse.Namespace) -> int:
    """Execute set command: quick setup of one key/URL on several platforms."""
    try:
        manager = build_manager()
        platforms = (
            [p.strip() for p in args.platforms.split(",") if p.strip()]
            if args.platforms
            else manager.registry.list_supported()
        )
        report = quick_set(manager, args.key, args.url, platforms)

        for profile in report.configured:
            summary = _summary(manager, profile)
            print(f"  Configured {profile.platform}: {summary.url}")
        if report.activated is not None:
            print(f"Activated '{report.activated.name}' [{report.activated.platform}]")

        if report.errors:
            for error_msg in report.errors:
                print(f"  Error: {error_msg}")
            return EXIT_PARTIAL if report.configured else EXIT_FATAL
        return EXIT_SUCCESS

    except InvalidArgumentError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_webhook(args: argparse.Namespace) -> int:
    """Execute webhook subcommands (add, list, remove, test)."""
    try:
        if args.webhook_command == "add":
            events = [e.strip() for e in args.events.split(",")] if args.events else None
            target = add_webhook(args.url, name=args.name, fmt=args.format, events=events)
            print(f"Added webhook '{target.name}' ({target.format}): {', '.join(target.events)}")
            return EXIT_SUCCESS

        if args.webhook_command == "list":
            targets = list_webhooks()
            if not targets:
                print("No webhooks configured. Use 'ccs webhook add <url>' to add one.")
                return EXIT_SUCCESS
            for target in targets:
                state = "enabled" if target.enabled else "disabled"
                print(f"  {target.name}  {target.url}  [{target.format}, {state}]  {', '.join(target.events)}")
            return EXIT_SUCCESS

        if args.webhook_command == "remove":
            if not remove_webhook(args.name):
                print(f"Error: Webhook '{args.name}' not found")
                return EXIT_CONFIG_ERROR
            print(f"Removed webhook '{args.name}'")
            return EXIT_SUCCESS

        if args.webhook_command == "test":
            if not list_webhooks():
                print("No webhooks configured.")
                return EXIT_SUCCESS
            manager = build_manager()
            current = manager.get_current_across_platforms()
            sample = current or Profile(
                name="ccswitch-test",
                platform=DEFAULT_PLATFORM,
                config={"env": {"ANTHROPIC_BASE_URL": "https://example.com/api"}},
            )
            if Notifier().notify(EVENT_SWITCH, None, sample):
                print("Test notification delivered.")
                return EXIT_SUCCESS
            print("Test notification failed, see warnings above.")
            return EXIT_PARTIAL

        print("Error: Missing webhook subcommand (add, list, remove, test)")
        return EXIT_CONFIG_ERROR

    except InvalidArgumentError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def _mirror_files() -> tuple[SyncFile, ...]:
    return with_extra_files(
        default_sync_files(get_config_dir()),
        SyncFile(WEBDAV_FILENAME, get_webdav_path()),
    )


def cmd_webdav(args: argparse.Namespace) -> int:
    """Execute webdav subcommands (config, upload, download, list).

    ABOUTME: Transfers are best-effort per file; exit 1 if nothing was transferred
    """
    try:
        if args.webdav_command == "config":
            password = args.password if args.password is not None else getpass.getpass("WebDAV password: ")
            config = MirrorConfig(
                url=args.url.strip(),
                username=args.username.strip(),
                password=password,
                remote_path=args.remote_path,
            )
            if not config.is_complete():
                print("Error: URL, username and password are required")
                return EXIT_CONFIG_ERROR
            save_mirror_config(config)
            print(f"Saved WebDAV config: {config.url} as {config.username} -> {config.remote_path}")
            return EXIT_SUCCESS

        if args.webdav_command not in ("upload", "download", "list"):
            print("Error: Missing webdav subcommand (config, upload, download, list)")
            return EXIT_CONFIG_ERROR

        config = load_mirror_config()
        if not config.is_complete():
            print("Error: WebDAV is not configured. Run 'ccs webdav config' first.")
            return EXIT_CONFIG_ERROR

        if args.webdav_command == "list":
            names = WebDAVClient(config).list()
            if not names:
                print(f"No files in {config.remote_path}")
            for name in names:
                print(f"  {name}")
            return EXIT_SUCCESS

        if args.webdav_command == "upload":
            report = upload_files(config, _mirror_files())
            verb = "Uploaded"
        else:
            report = download_files(config, _mirror_files())
            verb = "Downloaded"

        for name in report.transferred:
            print(f"  {verb} {name}")
        for name in report.skipped:
            print(f"  Skipped {name}")
        for error_msg in report.errors:
            print(f"  Error: {error_msg}")

        if report.transferred:
            Notifier().notify(EVENT_WEBDAV_SYNC)
        if report.errors and not report.transferred:
            return EXIT_PARTIAL
        return EXIT_SUCCESS

    except RemoteError as e:
        print(f"Error: {e}")
        return EXIT_PARTIAL
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccs",
        description="Switch API credential profiles for Claude Code and Codex CLI"
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"ccs v{__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    platform_help = f"Platform name (default: all, or {DEFAULT_PLATFORM} when adding)"

    # list command
    list_parser = subparsers.add_parser(
        "list",
        aliases=["ls"],
        help="List profiles and pick one to activate"
    )
    list_parser.add_argument("-p", "--platform", help=platform_help)

    # use command
    use_parser = subparsers.add_parser(
        "use",
        help="Activate a profile by its list number"
    )
    use_parser.add_argument("index", type=int, help="1-based number from 'ccs list'")
    use_parser.add_argument("-p", "--platform", help=platform_help)

    # current command
    current_parser = subparsers.add_parser(
        "current",
        help="Show the active profile of each platform"
    )
    current_parser.add_argument("-p", "--platform", help=platform_help)

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add (or overwrite) a profile"
    )
    add_parser.add_argument("alias", help="Profile name")
    add_parser.add_argument("key", help="API key or auth token")
    add_parser.add_argument("url", help="API base URL")
    add_parser.add_argument("-p", "--platform", help=platform_help)

    # delete command
    delete_parser = subparsers.add_parser(
        "delete",
        aliases=["rm"],
        help="Delete profiles by number or name"
    )
    delete_parser.add_argument("identifier", nargs="?", help="List number or profile name")
    delete_parser.add_argument("-p", "--platform", help=platform_help)
    delete_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    # platforms command
    subparsers.add_parser(
        "platforms",
        help="Show supported platforms"
    )

    # open command
    open_parser = subparsers.add_parser(
        "open",
        help="Open the profile store or its directory"
    )
    open_parser.add_argument("target", nargs="?", choices=["api", "dir"], default="api")

    # set command
    set_parser = subparsers.add_parser(
        "set",
        help="Configure one key and gateway URL on several platforms"
    )
    set_parser.add_argument("key", help="API key")
    set_parser.add_argument("url", help="Gateway base URL")
    set_parser.add_argument("--platforms", help="Comma-separated platforms (default: all)")

    # webhook command
    webhook_parser = subparsers.add_parser(
        "webhook",
        help="Manage webhook notifications"
    )
    webhook_sub = webhook_parser.add_subparsers(dest="webhook_command")
    webhook_add = webhook_sub.add_parser("add", help="Register a webhook URL")
    webhook_add.add_argument("url")
    webhook_add.add_argument("--name", help="Webhook name (default: the URL)")
    webhook_add.add_argument("--format", choices=FORMATS, default="feishu")
    webhook_add.add_argument("--events", help=f"Comma-separated events ({', '.join(EVENTS)})")
    webhook_sub.add_parser("list", help="List webhooks")
    webhook_remove = webhook_sub.add_parser("remove", help="Remove a webhook by name")
    webhook_remove.add_argument("name")
    webhook_sub.add_parser("test", help="Send a test notification")

    # webdav command
    webdav_parser = subparsers.add_parser(
        "webdav",
        help="Mirror configs to a WebDAV server"
    )
    webdav_sub = webdav_parser.add_subparsers(dest="webdav_command")
    webdav_config = webdav_sub.add_parser("config", help="Save WebDAV connection settings")
    webdav_config.add_argument("--url", required=True)
    webdav_config.add_argument("--username", required=True)
    webdav_config.add_argument("--password", help="Prompted for when omitted")
    webdav_config.add_argument("--remote-path", default="/claude-configs/")
    webdav_sub.add_parser("upload", help="Upload configs")
    webdav_sub.add_parser("download", help="Download and apply configs")
    webdav_sub.add_parser("list", help="List remote files")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    # Unsupported -p values are reported up front with the supported list
    platform = getattr(args, "platform", None)
    if platform is not None:
        manager = build_manager()
        if manager.registry.validate(platform) is None:
            supported = ", ".join(manager.registry.list_supported())
            print(f"Error: Unsupported platform '{platform}'. Supported: {supported}")
            return EXIT_CONFIG_ERROR

    # Dispatch to command
    if args.command in ("list", "ls"):
        return cmd_list(args)
    elif args.command == "use":
        return cmd_use(args)
    elif args.command == "current":
        return cmd_current(args)
    elif args.command == "add":
        return cmd_add(args)
    elif args.command in ("delete", "rm"):
        return cmd_delete(args)
    elif args.command == "platforms":
        return cmd_platforms(args)
    elif args.command == "open":
        return cmd_open(args)
    elif args.command == "set":
        return cmd_set(args)
    elif args.command == "webhook":
        return cmd_webhook(args)
    elif args.command == "webdav":
        return cmd_webdav(args)
    else:
        # No command specified, show help
        parser.print_help()
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
