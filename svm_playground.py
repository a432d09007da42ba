"""
ovrsvm demo: Support Vector Machine playground
==============================================

This script walks through the whole playground flow on a CSV file:
- load the table (header line first; the last column is the default label)
- pick the label and feature columns
- train one SVM per class (one-vs-rest) in the background
- report the training accuracy and a training confusion matrix
- classify new rows given as ``column=value`` pairs

Without ``--csv`` the nine-row iris sample is used.

Run
---
    python svm_playground.py --kernel rbf --cost 1.0
    python svm_playground.py --csv data.csv --label species \\
        --predict sepal_length=6.0 --predict sepal_width=3.0 \\
        --predict petal_length=4.8 --predict petal_width=1.8

Dependencies
------------
    pip install numpy pandas scikit-learn tqdm matplotlib seaborn
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List

from ovrsvm import (
    SAMPLE_IRIS_CSV,
    KernelKind,
    OvrSvmError,
    Session,
    TrainingConfig,
    extract_features,
    parse_csv_text,
    read_dataset,
)
from ovrsvm.decision import decision_scores, predict_many
from ovrsvm.features import parse_prediction_input
from ovrsvm.session import Error, Trained
from utils import plot_confusion_matrix, setup_logging


def parse_assignments(items: List[str]) -> Dict[str, str]:
    """Turn ``["a=1", "b=2"]`` into ``{"a": "1", "b": "2"}``."""
    values: Dict[str, str] = {}
    for item in items:
        column, sep, value = item.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected column=value, got {item!r}")
        values[column.strip()] = value.strip()
    return values


def main() -> int:
    parser = argparse.ArgumentParser(description="One-vs-rest SVM playground")
    parser.add_argument("--csv", type=str, default=None, help="CSV file (default: iris sample)")
    parser.add_argument("--label", type=str, default=None, help="Label column (default: last column)")
    parser.add_argument("--features", type=str, default=None,
                        help="Comma-separated feature columns (default: every other column)")
    parser.add_argument("--kernel", type=str, default=KernelKind.RBF.value,
                        choices=[k.value for k in KernelKind], help="Kernel")
    parser.add_argument("--cost", type=float, default=1.0, help="Cost (C)")
    parser.add_argument("--gamma", type=float, default=None, help="RBF gamma (default: 1 / number of features)")
    parser.add_argument("--workers", type=int, default=1, help="Labels trained in parallel")
    parser.add_argument("--predict", action="append", default=[], metavar="COLUMN=VALUE",
                        help="Feature value for a prediction (repeat for each feature)")
    parser.add_argument("--out", type=str, default="playground_output", help="Output directory")
    parser.add_argument("--no-plot", action="store_true", help="Do not save the confusion matrix")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    # --------------------------------------------------------
    # Load dataset
    # --------------------------------------------------------
    try:
        dataset = read_dataset(args.csv) if args.csv else parse_csv_text(SAMPLE_IRIS_CSV)
    except (OSError, OvrSvmError) as exc:
        logging.error("Could not load dataset: %s", exc)
        return 1

    with Session() as session:
        state = session.load(dataset)
        logging.info("Rows: %d | Columns: %d", len(dataset), len(dataset.columns))

        try:
            if args.label:
                state = session.select_label(args.label)
            if args.features:
                wanted = [c.strip() for c in args.features.split(",") if c.strip()]
                for column in state.feature_columns:
                    if column not in wanted:
                        state = session.toggle_feature(column)
                for column in wanted:
                    if column not in state.feature_columns:
                        state = session.toggle_feature(column)
            config = TrainingConfig(
                kernel=KernelKind(args.kernel),
                cost=args.cost,
                gamma=args.gamma,
                max_workers=args.workers,
            )
        except OvrSvmError as exc:
            logging.error("Invalid configuration: %s", exc)
            return 1

        logging.info("Label: %s | Features: %s", state.label_column, ", ".join(state.feature_columns))

        # --------------------------------------------------------
        # Train (background) and report
        # --------------------------------------------------------
        logging.info("Training...")
        state = session.submit_training(config, progress=True).result()
        logging.info("Status: %s", state.status)

        if isinstance(state, Error):
            logging.error("%s", state.error)
            return 1
        assert isinstance(state, Trained)

        logging.info("Training accuracy: %.2f%%", 100.0 * state.accuracy)

        if not args.no_plot:
            matrix, labels = extract_features(
                state.loaded.dataset, state.loaded.feature_columns, state.loaded.label_column
            )
            out = plot_confusion_matrix(
                labels,
                predict_many(state.model, matrix),
                state.model.labels,
                out_path=Path(args.out) / "confusion_matrix.png",
                title=f"Training confusion matrix ({config.kernel.value} kernel, C={config.cost:g})",
            )
            logging.info("Saved confusion matrix to: %s", out)

        # --------------------------------------------------------
        # Predict
        # --------------------------------------------------------
        if args.predict:
            try:
                values = parse_assignments(args.predict)
                prediction = session.predict(values)
                vector = parse_prediction_input(state.model.feature_columns, values)
            except (argparse.ArgumentTypeError, OvrSvmError) as exc:
                logging.error("Prediction failed: %s", exc)
                return 1

            for scored in decision_scores(state.model, vector):
                logging.debug(
                    "  %s: %.4f%s", scored.label, scored.score, " (decision fallback)" if scored.fallback else ""
                )
            logging.info("Prediction: %s", prediction)

    logging.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
