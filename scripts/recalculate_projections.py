"""Recalcula as projeções de patrimônio fora do servidor web.

Uso:
    python scripts/recalculate_projections.py            # todos os usuarios
    python scripts/recalculate_projections.py --user-id 7
"""

import argparse
import os
import sys


def _setup_path():
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if root not in sys.path:
        sys.path.insert(0, root)


def main(argv=None):
    _setup_path()

    parser = argparse.ArgumentParser(description="Recalcula projecoes de patrimonio.")
    parser.add_argument("--user-id", type=int, default=None)
    args = parser.parse_args(argv)

    from app import create_app, recalc_all_projections

    app = create_app()
    ok, failed = recalc_all_projections(app, args.user_id)
    print(f"Projecoes recalculadas: {ok} ok, {failed} com falha.")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
