"""Command-line entry point.

Usage:
    python -m structkb "钢筋混凝土梁的裂缝控制"
    python -m structkb --topic 强柱弱梁 --image-out beam.png
    python -m structkb --model DEEPSEEK --deepseek-key sk-... "轴压比"
    python -m structkb --list-topics

Provider overrides given on the command line apply to this run only; the
persisted config is read but never written.
"""

from __future__ import annotations

import argparse
import base64
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from config.settings import Settings
from structkb import config_store
from structkb.assistant import Assistant
from structkb.catalog import all_topics, find_category, get_categories
from structkb.errors import AssistantError
from structkb.models import ModelType


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="structkb",
        description="Ask structural-engineering questions about Chinese building codes.",
    )
    parser.add_argument("query", nargs="?", help="Question, or a topic name with --topic")
    parser.add_argument("--topic", action="store_true", help="Treat QUERY as a catalog topic")
    parser.add_argument(
        "--model",
        choices=[m.value for m in ModelType],
        help="Provider for this run (default: the saved setting)",
    )
    parser.add_argument("--deepseek-key", help="DeepSeek API key for this run")
    parser.add_argument("--image-out", type=Path, help="Write the illustration to this file")
    parser.add_argument("--list-topics", action="store_true", help="Print the topic catalog and exit")
    parser.add_argument("--category", help="With --list-topics, print only this category id")
    return parser


def _print_topics(category_id: Optional[str] = None) -> int:
    categories = get_categories()
    if category_id:
        category = find_category(category_id)
        if category is None:
            print(f"error: unknown category {category_id!r}", file=sys.stderr)
            return 2
        categories = (category,)
    for category in categories:
        print(f"{category.title} [{category.id}]")
        for item in category.items:
            print(f"  - {item}")
    return 0


def _write_image(data_uri: str, path: Path) -> None:
    _, _, payload = data_uri.partition("base64,")
    path.write_bytes(base64.b64decode(payload))


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.WARNING)
    args = _build_parser().parse_args(argv)

    if args.list_topics:
        return _print_topics(args.category)
    if not args.query or not args.query.strip():
        print("error: a query is required", file=sys.stderr)
        return 2
    if args.topic and args.query.strip() not in all_topics():
        print(f"error: unknown topic {args.query.strip()!r} (see --list-topics)", file=sys.stderr)
        return 2

    settings = Settings()
    config_store.init_db(settings.config_db_path)
    config = config_store.load(settings.config_db_path)

    overrides = {}
    if args.model:
        overrides["model_type"] = ModelType(args.model)
    if args.deepseek_key is not None:
        overrides["deepseek_api_key"] = args.deepseek_key
    if overrides:
        config = config.model_copy(update=overrides)

    assistant = Assistant(settings, config_store.ConfigHolder(config))
    try:
        if args.topic:
            result = assistant.select_topic(args.query.strip())
        else:
            result = assistant.submit_query(args.query)
    except AssistantError as exc:
        print(exc.message, file=sys.stderr)
        return 1

    print(result.text)
    if result.sources:
        print("\n参考来源:")
        for source in result.sources:
            print(f"- {source.title}: {source.uri}")
    if result.image and args.image_out:
        _write_image(result.image, args.image_out)
        print(f"\n示意图已保存: {args.image_out}")
    return 0
