#!/usr/bin/env python3
"""
macosify — macOS-like GNOME makeover
Dock bounce, gentle scrolling, night light, and a day/night theme
and wallpaper switcher driven by a systemd user timer.
"""

import sys
import shutil
import logging
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from theming.config import ConfigError, default_manifest, load_config, save_config

BANNER = r"""
╔══════════════════════════════════════════════╗
║  🍎 macosify                                 ║
║  macOS-like GNOME makeover                   ║
║                                              ║
║    Dock bounce · gentle scroll · night light ║
║    Day/night theme & wallpaper switcher      ║
╚══════════════════════════════════════════════╝
"""


def setup_logging(verbose=False, log_file=None):
    level = logging.DEBUG if verbose else logging.WARNING
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
    )


def build_parser():
    parser = argparse.ArgumentParser(
        description="macosify — make GNOME look and feel like macOS"
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to a manifest YAML (defaults are used for missing keys)",
        default=None
    )
    parser.add_argument(
        "--save-config",
        help="Save the effective manifest to YAML for reuse",
        metavar="PATH"
    )
    parser.add_argument(
        "--generate-config",
        help="Write the default manifest to PATH and exit",
        metavar="PATH"
    )
    parser.add_argument(
        "--dry-run",
        help="Show what would be done without executing",
        action="store_true"
    )
    parser.add_argument(
        "--check-deps",
        help="Check if the required tools are installed and exit",
        action="store_true"
    )
    parser.add_argument(
        "--daynight",
        help="Apply the day or night appearance once and exit (used by the timer)",
        action="store_true"
    )
    parser.add_argument(
        "--throttle-preview",
        help="Replay comma-separated scroll timestamps (ms) through the throttle",
        metavar="TIMES"
    )
    parser.add_argument(
        "--bounce-preview",
        help="Replay app launches (APP[@MS],...) through the dock bounce",
        metavar="LAUNCHES"
    )
    parser.add_argument(
        "-y", "--yes",
        help="Don't ask for confirmation",
        action="store_true"
    )
    parser.add_argument(
        "-v", "--verbose",
        help="Debug logging",
        action="store_true"
    )
    parser.add_argument(
        "--log-file",
        help="Also write diagnostics to this file",
        default=None
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    # ── Timer pass: quiet, never fails the unit on a bad write ──
    if args.daynight:
        return run_daynight(args.config)

    print(BANNER)

    if args.generate_config:
        path = save_config(default_manifest(), args.generate_config)
        print(f"💾 Default manifest written: {path}")
        return 0

    if args.check_deps:
        return 0 if check_dependencies() else 1

    # ── Collect config ──────────────────────────────────────
    try:
        if args.config:
            manifest = load_config(args.config)
            print(f"📄 Loaded manifest: {args.config}")
        else:
            manifest = default_manifest()
    except ConfigError as e:
        print(f"❌ {e}")
        return 1

    if args.throttle_preview:
        return throttle_preview(manifest, args.throttle_preview)

    if args.bounce_preview:
        return bounce_preview(manifest, args.bounce_preview)

    if args.save_config:
        path = save_config(manifest, args.save_config)
        print(f"💾 Manifest saved: {path}")

    print_summary(manifest)

    if args.dry_run:
        print("\n🏜️  Dry run — nothing was modified.")
        return 0

    if not args.yes:
        confirm = input("\nProceed? (y/n): ").strip().lower()
        if confirm not in ("y", "yes"):
            print("❌ Aborted.")
            return 1

    from theming.provisioner import Provisioner
    config_path = args.save_config or args.config
    results = Provisioner(manifest, config_path=config_path).run()

    print("\nNotes:")
    print("- Log out and back in once so GNOME Shell loads the new extensions.")
    print("- Adjust throttle/bounce/night light in the manifest and rerun.")
    return 0 if all(results.values()) else 1


def run_daynight(config_path):
    from theming.daynight import AppearanceScheduler
    from theming.gsettings import GSettings

    try:
        manifest = load_config(config_path) if config_path else default_manifest()
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    appearance = AppearanceScheduler(GSettings(), manifest).apply()
    print(f"Applied {appearance.value} appearance")
    return 0


def throttle_preview(manifest, raw_times):
    from theming.scroll import replay

    try:
        times = [float(t) for t in raw_times.split(",") if t.strip()]
    except ValueError:
        print(f"❌ Not a list of numbers: {raw_times}")
        return 1

    scroll = manifest["scroll"]
    decisions = replay(times, scroll["every_nth"], scroll["min_interval_ms"])
    print(f"Throttle N={scroll['every_nth']}, min {scroll['min_interval_ms']}ms\n")
    for ts, kept in decisions:
        print(f"  {ts:10.1f} ms  {'✅ kept' if kept else '·  dropped'}")
    kept_count = sum(1 for _, kept in decisions if kept)
    print(f"\n  {kept_count}/{len(decisions)} events kept")
    return 0


def bounce_preview(manifest, raw_launches):
    from theming.bounce import replay

    launches = []
    for item in raw_launches.split(","):
        if not item.strip():
            continue
        app_id, _, ms = item.strip().partition("@")
        try:
            ts = float(ms) if ms else 0.0
        except ValueError:
            ts = None
        if not app_id or ts is None or ts < 0:
            print(f"❌ Expected APP[@MS], got: {item}")
            return 1
        launches.append((app_id, ts))

    bounce = manifest["bounce"]
    timeline = replay(
        launches, bounce["scale"], bounce["duration_ms"], bounce["cycles"], bounce["retry_delay_ms"],
    )
    print(f"Bounce {bounce['cycles']}× to {bounce['scale']} over {bounce['duration_ms']}ms\n")
    for ts, app_id, scale in timeline:
        print(f"  {ts:10.1f} ms  {app_id:30s} → {scale}")
    print(f"\n  {len(timeline)} eases for {len(launches)} launches")
    return 0


def print_summary(manifest):
    """Print a human-readable summary of the makeover config."""
    dn = manifest["daynight"]
    scroll = manifest["scroll"]
    bounce = manifest["bounce"]

    print("\n" + "─" * 50)
    print("📋 Makeover Summary")
    print("─" * 50)
    print(f"  Day/Night:   {dn['day_start_hour']:02d}:00 → {dn['night_start_hour']:02d}:00, "
          f"every {dn['interval_minutes']}m")
    print(f"  Themes:      {dn['light_theme']} / {dn['dark_theme']}")
    print(f"  Wallpapers:  {dn['wallpaper_dir']}")
    print(f"  Scroll:      keep 1/{scroll['every_nth']}, min {scroll['min_interval_ms']}ms")
    print(f"  Dock bounce: {bounce['cycles']}× to {bounce['scale']} over {bounce['duration_ms']}ms")
    nl = manifest["night_light"]
    print(f"  Night light: {str(nl['percent']) + '%' if nl.get('enabled', True) else 'Disabled'}")
    print(f"  Dock:        {manifest['dock']['position']}, {manifest['dock']['icon_size']}px")
    print(f"  Extensions:  {len(manifest['extensions'])} to enable")
    print("─" * 50)


def check_dependencies():
    """Check and report on all required/optional tools."""
    print("🔍 Checking dependencies...\n")

    required = {
        "gsettings": "Read/write GNOME settings",
        "systemctl": "Day/night timer (systemd user units)",
    }

    optional = {
        "gnome-extensions": "Enable generated and third-party extensions",
        "magick": "Wallpaper validation (ImageMagick 7)",
        "identify": "Wallpaper validation (ImageMagick 6)",
        "file": "Wallpaper validation fallback",
        "imwheel": "Gentle scrolling on X11",
    }

    print("  Required:")
    all_ok = True
    for tool, desc in required.items():
        found = shutil.which(tool)
        status = "✅" if found else "❌"
        if not found:
            all_ok = False
        print(f"    {status} {tool:20s} — {desc}")

    print("\n  Optional:")
    for tool, desc in optional.items():
        found = shutil.which(tool)
        status = "✅" if found else "⬜"
        print(f"    {status} {tool:20s} — {desc}")

    print()
    if all_ok:
        print("  ✅ All required dependencies satisfied!")
    else:
        print("  ❌ Some required dependencies are missing.")
        print("     Install them with: dnf install <package>")
    return all_ok


if __name__ == "__main__":
    sys.exit(main())
