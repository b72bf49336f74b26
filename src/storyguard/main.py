#!/usr/bin/env python
"""
StoryGuard - Scene planning and density quality control

Command-line entry point:
    storyguard analyze chapter.txt --target density_curve.json
    storyguard plan setup conflict climax --context chapter_plan.json
    storyguard write setup conflict climax --context chapter_plan.json
"""
import sys
import json
import asyncio
import logging
import argparse
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from storyguard.models import ChapterContext, TargetCurve
from storyguard.planning import SceneStructurePlanner
from storyguard.tools import DensityController


def setup_logging(log_dir: str = "./logs", level: int = logging.INFO) -> logging.Logger:
    """
    Set up logging configuration for the current run.

    Creates the log directory if it doesn't exist and opens a new log file
    with a timestamp for each run.

    Returns:
        Configured logger instance
    """
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"storyguard_{timestamp}.log"

    logger = logging.getLogger("StoryGuard")
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # Console output goes to stderr so stdout stays clean JSON
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("StoryGuard Logging Initialized")
    logger.info(f"Log file: {log_file}")
    logger.info("=" * 80)

    return logger


def _load_json(path: Optional[str]) -> Optional[Dict[str, Any]]:
    if not path:
        return None
    return json.loads(Path(path).read_text(encoding='utf-8'))


def _load_chapter_context(path: Optional[str]) -> ChapterContext:
    """Chapter plans often come straight from an LLM, so repair before parsing."""
    if not path:
        return ChapterContext()
    return ChapterContext.from_llm_output(Path(path).read_text(encoding='utf-8'))


def run_analyze(text: str, segment_count: int = 10, target: Optional[TargetCurve] = None) -> Dict[str, Any]:
    """Density analysis, target comparison and balance check of one text."""
    controller = DensityController()
    density = controller.analyze_density(text, segment_count)
    comparison = controller.compare_with_target(density, target)
    balance = controller.check_balance(density)
    return {
        "density": density.model_dump(),
        "comparison": comparison.model_dump(),
        "balance": balance.model_dump(),
    }


def run_plan(scene_types: List[str], chapter_context: ChapterContext) -> Dict[str, Any]:
    """Plan a scene sequence and validate every plan."""
    planner = SceneStructurePlanner()
    plans = planner.plan_scenes(scene_types, chapter_context)
    return {
        "scenes": [plan.model_dump() for plan in plans],
        "validation": {
            plan.id: planner.validate_scene_structure(plan).model_dump() for plan in plans
        },
    }


def run_write(scene_types: List[str], chapter_context: ChapterContext) -> Dict[str, Any]:
    """Plan and write a chapter through the LLM crew."""
    # Deferred: importing the crew configures the LLM and registers listeners
    from storyguard.crews import SceneCrew
    from storyguard.listeners import llm_logging_listener

    logger = logging.getLogger("StoryGuard")
    result = asyncio.run(SceneCrew().write_chapter(scene_types, chapter_context))
    logger.info(f"[SUMMARY] {llm_logging_listener.summary()}")

    return {
        "passed": result["passed"],
        "chapter_text": result["chapter_text"],
        "scenes": [
            {
                "id": scene["plan"].id,
                "attempts": scene["attempts"],
                "passed": scene["report"].passed,
                "issues": [issue.model_dump() for issue in scene["report"].issues],
            }
            for scene in result["scenes"]
        ],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="StoryGuard: scene planning and density quality control"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="./logs",
        help="Directory for run logs (default: ./logs)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze the density curve of a text file")
    analyze.add_argument("file", type=str, help="Text file to analyze")
    analyze.add_argument("--segments", type=int, default=10, help="Number of segments (default: 10)")
    analyze.add_argument("--target", type=str, default=None, help="Target density curve JSON")

    plan = subparsers.add_parser("plan", help="Plan a sequence of scenes")
    plan.add_argument("scene_types", nargs="+", help="Scene types (setup/conflict/climax/resolution)")
    plan.add_argument("--context", type=str, default=None, help="Chapter context JSON")
    plan.add_argument("--word-count", type=int, default=None, help="Chapter target word count")

    write = subparsers.add_parser("write", help="Plan and write a chapter with the LLM")
    write.add_argument("scene_types", nargs="+", help="Scene types (setup/conflict/climax/resolution)")
    write.add_argument("--context", type=str, default=None, help="Chapter context JSON")
    write.add_argument("--output", type=str, default=None, help="Write chapter text to this file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for command-line usage.

    Prints results as JSON on stdout; returns 0 on success, 1 on error.
    """
    args = build_parser().parse_args(argv)
    logger = setup_logging(args.log_dir)

    try:
        if args.command == "analyze":
            text = Path(args.file).read_text(encoding='utf-8')
            target_data = _load_json(args.target)
            target = TargetCurve.model_validate(target_data) if target_data else None
            result = run_analyze(text, args.segments, target)

        elif args.command == "plan":
            chapter_context = _load_chapter_context(args.context)
            if args.word_count:
                chapter_context.target_word_count = args.word_count
            result = run_plan(args.scene_types, chapter_context)

        else:
            chapter_context = _load_chapter_context(args.context)
            result = run_write(args.scene_types, chapter_context)
            if args.output:
                Path(args.output).write_text(result["chapter_text"], encoding='utf-8')
                logger.info(f"Chapter saved to {args.output}")

        print(json.dumps(result, ensure_ascii=False, indent=2))
        return 0

    except Exception as e:
        logger.error(f"Command {args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
