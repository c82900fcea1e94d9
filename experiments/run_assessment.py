#!/usr/bin/env python3
"""
Goodness-of-Fit Assessment Runner
=================================

Assesses one or several candidate random graph models against a network
bundled with NetworkX, writing tables, JSON results and figures.

Usage:
    python run_assessment.py --network florentine --models gnm configuration
    python run_assessment.py --network karate --n-iter 200 --n-jobs 4
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import networkx as nx

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import load_assessment_settings, load_model_settings
from netgof import AssessmentConfig, BatchAbort, compare_models
from netgof.config import DEFAULT_RESULTS_DIR, RANDOM_SEED
from netgof.generators import available_models, model_like
from netgof.visualization import (
    extreme_count_summary,
    model_comparison_table,
    plot_model_comparison,
    results_to_markdown,
    save_figure,
    save_table,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

NETWORKS = {
    "florentine": nx.florentine_families_graph,
    "karate": nx.karate_club_graph,
    "davis": nx.davis_southern_women_graph,
    "les_miserables": nx.les_miserables_graph,
}


def load_network(name: str) -> nx.Graph:
    """Load a bundled network as a simple, unweighted, undirected graph."""
    G = nx.Graph(NETWORKS[name]())
    G.remove_edges_from(nx.selfloop_edges(G))
    return nx.convert_node_labels_to_integers(G, label_attribute="label")


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Assess candidate random graph models against an observed network"
    )
    parser.add_argument(
        "--network",
        choices=sorted(NETWORKS),
        default="florentine",
        help="Observed network",
    )
    parser.add_argument(
        "--models",
        nargs="+",
        choices=available_models(),
        default=["gnm", "configuration", "small_world", "preferential_attachment"],
        help="Candidate models, matched to the observed network",
    )
    parser.add_argument("--n-iter", type=int, default=None, help="Draws per model")
    parser.add_argument("--alpha", type=float, default=None, help="Two-sided test level")
    parser.add_argument("--n-jobs", type=int, default=None, help="Worker threads")
    parser.add_argument(
        "--seed",
        type=int,
        default=RANDOM_SEED,
        help="Session seed",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=f"{DEFAULT_RESULTS_DIR}/assessment",
        help="Output directory for results",
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Run a quick assessment with 100 draws per model",
    )
    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    settings = load_assessment_settings()
    if args.quick:
        settings["n_iter"] = 100
    for key in ("n_iter", "alpha", "n_jobs"):
        value = getattr(args, key)
        if value is not None:
            settings[key] = value
    config = AssessmentConfig.from_dict(settings)
    model_settings = load_model_settings()

    G = load_network(args.network)

    logger.info("=" * 70)
    logger.info("NETWORK GOODNESS-OF-FIT ASSESSMENT")
    logger.info("=" * 70)
    logger.info(f"Network: {args.network} ({G.number_of_nodes()} nodes, {G.number_of_edges()} edges)")
    logger.info(f"Models: {', '.join(args.models)}")
    logger.info(f"Draws per model: {config.n_iter}, alpha = {config.alpha}")
    logger.info(f"Random seed: {args.seed}")
    logger.info("")

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    prefix = f"{args.network}_{timestamp}"

    generators = {
        name: model_like(name, G, **(model_settings.get(name) or {}))
        for name in args.models
    }

    try:
        reports = compare_models(G, generators, config=config, seed=args.seed)
    except BatchAbort as e:
        logger.error(f"Assessment aborted: {e}")
        sys.exit(1)

    # Tables
    table = model_comparison_table(reports)
    save_table(table, str(output_dir / f"{prefix}_table.csv"))
    save_table(table, str(output_dir / f"{prefix}_table.md"), format="markdown")

    summary = extreme_count_summary(reports)
    logger.info("\n" + results_to_markdown(summary))

    # JSON results
    results = {
        "network": args.network,
        "seed": args.seed,
        "timestamp": timestamp,
        "config": config.to_dict(),
        "models": {name: report.to_dict() for name, report in reports.items()},
    }
    json_path = output_dir / f"{prefix}_results.json"
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(results, f, indent=2)
    logger.info(f"Saved results to {json_path}")

    # Figures
    for name, report in reports.items():
        fig = report.plot()
        save_figure(fig, str(output_dir / f"{prefix}_{name}.png"), dpi=150)
        plt.close(fig)

    fig = plot_model_comparison(reports, title=f"{args.network}: candidate models")
    save_figure(fig, str(output_dir / f"{prefix}_comparison.png"), dpi=150)
    plt.close(fig)

    logger.info("")
    logger.info("=" * 70)
    logger.info("ASSESSMENT COMPLETE")
    logger.info("=" * 70)
    for report in reports.values():
        logger.info(report.summary())


if __name__ == "__main__":
    main()
