"""Command line interface for salary fairness toolkit."""

import argparse
import sys
from pathlib import Path

from .pipeline_executor import PipelineExecutor
from .config import ConfigParser


def main(argv=None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="salary-fairness",
        description="Regression-based salary fairness analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "config_path", type=str, help="Path to pipeline configuration YAML file"
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate configuration without running the analysis",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    try:
        config_path = Path(args.config_path)
        print(f"Loading configuration from: {config_path}")

        config = ConfigParser.load(config_path)

        errors = ConfigParser.validate(config)
        if errors:
            print("Configuration validation failed:")
            for error in errors:
                print(f"  - {error}")
            sys.exit(1)

        print("Configuration validated successfully")

        if args.validate_only:
            print("Validation complete. Exiting.")
            return

        executor = PipelineExecutor(config, verbose=args.verbose)
        results = executor.execute_pipeline()

        print(f"Analysis completed successfully (test RMSE: {results['rmse']:,.2f})")
        for name, path in results["outputs"].items():
            print(f"  {name}: {path}")

    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Pipeline execution failed: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
