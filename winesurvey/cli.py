"""
winesurvey-reports - batch reports over the wine survey responses.

Usage:
  winesurvey-reports basic
  winesurvey-reports map --online
  winesurvey-reports all --output-dir reports/
"""

import argparse
import logging
import sys

from . import create_app
from .errors import DatabaseConnectionFailure
from .reports import advanced, basic, executive, geographic, georef, loader

logger = logging.getLogger(__name__)

REPORTS = {
    "basic": basic.run,
    "advanced": advanced.run,
    "geographic": geographic.run,
    "executive": executive.run,
}
ALL_SEQUENCE = ("basic", "advanced", "geographic", "executive")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="winesurvey-reports",
        description="Relatórios da pesquisa sobre vinhos e espumantes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Descriptive statistics on the console
  winesurvey-reports basic

  # Map with real geocoding (ViaCEP + Nominatim, ~1 request/second)
  winesurvey-reports map --online

  # Every report, files written to ./reports
  winesurvey-reports all --output-dir reports
        """
    )
    parser.add_argument(
        "--config",
        default="default",
        choices=["default", "development", "production", "testing"],
        help="Configuration profile (default: default)"
    )
    parser.add_argument(
        "--output-dir",
        help="Directory for generated files (default: REPORT_OUTPUT_DIR)"
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("basic", help="Descriptive statistics")
    sub.add_parser("advanced", help="Marketing report, CSV and JSON summary")
    sub.add_parser("geographic", help="Regional analysis by CEP prefix")
    sub.add_parser("executive", help="Executive summary (JSON + text)")
    map_parser = sub.add_parser("map", help="Georeference respondents and write the HTML map")
    map_parser.add_argument(
        "--online",
        action="store_true",
        help="Geocode through ViaCEP and Nominatim instead of the offline prefix table"
    )
    sub.add_parser("all", help="basic, advanced, geographic and executive in sequence")
    return parser


def run_command(app, args, echo=print):
    """Run the selected report(s) inside an app context; returns the exit code."""
    with app.app_context():
        try:
            loader.check_connection()
        except DatabaseConnectionFailure as e:
            logger.error(f"Database connection failed: {e}")
            echo(f"❌ Erro de conexão com o banco de dados: {e}")
            return 1

        cfg = app.config
        if args.command == "map":
            results = [georef.run(cfg, online=args.online, echo=echo)]
        elif args.command == "all":
            results = []
            for name in ALL_SEQUENCE:
                echo("\n" + "=" * 60)
                results.append(REPORTS[name](cfg, echo=echo))
        else:
            results = [REPORTS[args.command](cfg, echo=echo)]

    files = [path for result in results for path in result.files]
    if args.command == "all":
        echo("\n📂 Arquivos gerados:")
        for path in files:
            echo(f"  • {path}")
    failed = [f"{r.name}: {s}" for r in results for s in r.failed_sections]
    if failed:
        echo(f"\n⚠️  Seções com erro: {', '.join(failed)}")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    app = create_app(args.config, create_tables=False)
    if args.output_dir:
        app.config["REPORT_OUTPUT_DIR"] = args.output_dir
    sys.exit(run_command(app, args))


if __name__ == "__main__":
    main()
