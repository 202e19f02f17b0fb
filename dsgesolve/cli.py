"""
dsgesolve CLI
Solve a preset and report determinacy and impulse responses.
"""

import argparse
import sys

from .preset import Scenario
from .statespace import impulse_response


def main(argv=None):
    parser = argparse.ArgumentParser(description="dsgesolve: regime-switching linear RE solver")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # --- RUN Command ---
    run_parser = subparsers.add_parser("run", help="Solve a preset")
    run_parser.add_argument("preset", help="Preset name or YAML path (e.g., nk_temporary_zlb)")
    run_parser.add_argument("--shock", type=str, help="Shock to trace (defaults to the first shock)")
    run_parser.add_argument("--size", type=float, default=1.0, help="Shock size")
    run_parser.add_argument("--horizon", type=int, default=20, help="Impulse response horizon")
    run_parser.add_argument("--export", type=str, help="Path to export impulse responses (.csv or .png)")
    run_parser.add_argument("--verbose", action="store_true", help="Print solver progress")

    args = parser.parse_args(argv)

    if args.command == "run":
        try:
            run(args)
        except Exception as e:
            print("\n[Error] Solve failed to complete.")
            print(f"Details: {str(e)}")
            sys.exit(1)
    else:
        parser.print_help()


def run(args):
    print(f"--- dsgesolve: running {args.preset} ---")

    # 1. Build
    scenario = Scenario.from_preset(args.preset, verbose=args.verbose)

    # 2. Solve
    sol = scenario.solve(verbose=args.verbose)
    print(sol.to_dataframe().to_string())

    # 3. Impulse responses from the forecast start on
    shock = args.shock or scenario.model.shock_names[0]
    start = scenario.regime_config.forecast_start or 1
    irf = impulse_response(sol.laws[start - 1:], shock, horizon=args.horizon, size=args.size,
                           state_names=scenario.state_names,
                           shock_names=scenario.model.shock_names)

    # 4. Export
    if args.export:
        if args.export.endswith(".csv"):
            irf.to_csv(args.export)
            print(f"Impulse responses saved to {args.export}")
        else:
            from .viz import plot_impulse_responses
            plot_impulse_responses(irf, scenario.model.variables,
                                   title=f"{scenario.name}: {shock}", save_path=args.export)
    else:
        print(irf.head(8).to_string())
        print("\nNote: No --export path provided. Use --export irf.csv or --export irf.png to save.")
    return irf


if __name__ == "__main__":
    main()
