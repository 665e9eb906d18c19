"""Command-line interface for the Myanmar subtitle translator."""

from __future__ import annotations

import asyncio
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from tqdm import tqdm

from .config import TranslatorConfig, DEFAULT_GLOSSARY_FILENAME
from .errors import MmsubError
from .glossary import Glossary, load_glossary, parse_glossary_terms
from .llm_client import create_client
from .models import StyleExample, TranslationProject
from .parser import read_srt, save_srt, validate_srt_file
from .reference import create_reference_map, extract_style_examples
from .store import ProjectStore, load_training_examples
from .training import import_training_data
from .translator import translate_batch, generate_training_feedback

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mmsub",
        description="English to Myanmar subtitle translator with reference and training memory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s translate ep02.srt                          # Basic translation
  %(prog)s translate ep02.srt -g glossary.txt          # Use glossary file
  %(prog)s translate ep02.srt -t "Walter=ဝေါ်လ်တာ"      # Inline glossary term
  %(prog)s translate ep02.srt --ref-original ep01.srt --ref-translated mm_ep01.srt
  %(prog)s train ep01.srt ai_ep01.srt human_ep01.srt   # Learn from corrections
  %(prog)s history list
        """
    )

    # Shared options
    parser.add_argument("--api-key", help="API key (or set GEMINI_API_KEY)")
    parser.add_argument("--base-url", help="OpenAI-compatible endpoint (or set MMSUB_BASE_URL)")
    parser.add_argument("--model", dest="model_name", help="Model name (or set MMSUB_MODEL)")
    parser.add_argument("--store-dir", help="Project store directory (or set MMSUB_STORE_DIR)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    sub = parser.add_subparsers(dest="command", required=True)

    # translate
    p_translate = sub.add_parser("translate", help="Translate an English SRT file")
    p_translate.add_argument("input_path", help="Input SRT file path")
    p_translate.add_argument("output_path", nargs='?', default=None, help="Output SRT file path")
    p_translate.add_argument("-g", "--glossary", dest="glossary_path", help="Glossary file path")
    p_translate.add_argument("-t", "--term", dest="terms", action="append", default=[],
                             help="Glossary term as TERM=TRANSLATION (repeatable)")
    p_translate.add_argument("--ref-original", help="Previous episode, English SRT")
    p_translate.add_argument("--ref-translated", help="Previous episode, Myanmar SRT")
    p_translate.add_argument("--batch-size", type=int, default=None, help="Lines per request")
    p_translate.add_argument("--training-limit", type=int, default=None,
                             help="Max training examples taken from history")
    p_translate.add_argument("--no-history", action="store_true", help="Do not use saved corrections")
    p_translate.add_argument("--no-save", action="store_true", help="Do not save the project to history")

    # train
    p_train = sub.add_parser("train", help="Import a human-corrected translation as training data")
    p_train.add_argument("original_path", help="English SRT")
    p_train.add_argument("ai_path", help="AI draft SRT")
    p_train.add_argument("human_path", help="Human-edited SRT")
    p_train.add_argument("--instructions", default="", help="Extra notes for the feedback")
    p_train.add_argument("--no-feedback", action="store_true", help="Skip generating feedback")

    # history
    p_history = sub.add_parser("history", help="Manage saved projects")
    history_sub = p_history.add_subparsers(dest="history_command", required=True)
    history_sub.add_parser("list", help="List saved projects")
    p_delete = history_sub.add_parser("delete", help="Delete a saved project")
    p_delete.add_argument("project_id")
    p_export = history_sub.add_parser("export", help="Write a saved project as SRT")
    p_export.add_argument("project_id")
    p_export.add_argument("output_path")

    return parser


def _load_srt_file(path_str: str) -> Path:
    path = Path(path_str).expanduser().resolve()
    error = validate_srt_file(path)
    if error:
        raise MmsubError(error)
    return path


def _build_glossary(args: argparse.Namespace) -> Glossary:
    if args.glossary_path:
        glossary = load_glossary(Path(args.glossary_path).expanduser().resolve())
    elif Path(DEFAULT_GLOSSARY_FILENAME).exists():
        logger.info(f"Auto-detected '{DEFAULT_GLOSSARY_FILENAME}'")
        glossary = load_glossary(Path(DEFAULT_GLOSSARY_FILENAME))
    else:
        glossary = Glossary()

    for term, translation in parse_glossary_terms(args.terms):
        glossary.add(term, translation)
    return glossary


async def cmd_translate(args: argparse.Namespace, config: TranslatorConfig, store: ProjectStore) -> int:
    """Translate one file."""
    in_path = _load_srt_file(args.input_path)
    logger.info(f"Reading: {in_path}")
    blocks = read_srt(in_path)
    if not blocks:
        logger.error("No valid subtitle blocks found")
        return 1
    logger.info(f"Parsed {len(blocks)} subtitle blocks")

    glossary = _build_glossary(args)

    training_examples: List[StyleExample] = []
    if not args.no_history:
        training_examples = load_training_examples(store, config.training_limit)
        logger.info(f"Loaded {len(training_examples)} training examples from history")

    reference_map: Dict[str, str] | None = None
    consistency_examples: List[StyleExample] = []
    if args.ref_original and args.ref_translated:
        ref_original = _load_srt_file(args.ref_original).read_text(encoding="utf-8-sig")
        ref_translated = _load_srt_file(args.ref_translated).read_text(encoding="utf-8-sig")
        reference_map = create_reference_map(ref_original, ref_translated)
        consistency_examples = extract_style_examples(ref_original, ref_translated)
        logger.info(
            f"Reference: {len(reference_map)} exact lines, "
            f"{len(consistency_examples)} style examples"
        )
    elif args.ref_original or args.ref_translated:
        logger.warning("Both --ref-original and --ref-translated are needed, ignoring reference")

    client = create_client(config.api_key, config.base_url, config.timeout)

    with tqdm(total=len(blocks), desc="Translating", unit="line") as bar:
        def on_progress(done: int, message: str) -> None:
            bar.set_postfix_str(message)
            bar.update(done - bar.n)

        translated = await translate_batch(
            client,
            blocks,
            reference_map,
            consistency_examples,
            training_examples,
            glossary,
            on_progress,
            model=config.model_name,
            batch_size=config.batch_size,
            retry_failed=config.retry_failed,
        )

    if args.output_path:
        out_path = Path(args.output_path)
    else:
        out_path = in_path.with_name(f"{config.output_prefix}{in_path.name}")
    save_srt(translated, out_path)

    if not args.no_save:
        project = TranslationProject.create(in_path.name, translated)
        store.save(project)
        logger.info(f"Project saved to history: {project.id}")

    done = sum(1 for b in translated if b.translated)
    from_ref = sum(1 for b in translated if b.from_reference)
    logger.info(f"Done! {done}/{len(translated)} translated ({from_ref} from reference). Saved to {out_path}")
    return 0


async def cmd_train(args: argparse.Namespace, config: TranslatorConfig, store: ProjectStore) -> int:
    """Import a training triple and optionally ask for feedback."""
    original = _load_srt_file(args.original_path).read_text(encoding="utf-8-sig")
    ai_draft = _load_srt_file(args.ai_path).read_text(encoding="utf-8-sig")
    human_path = _load_srt_file(args.human_path)
    human = human_path.read_text(encoding="utf-8-sig")

    result = import_training_data(store, human_path.name, original, ai_draft, human)
    logger.info(f"Saved training project {result.project.id} ({len(result.project.blocks)} lines)")

    if args.no_feedback:
        return 0

    if not result.diffs:
        print("No significant differences found between AI draft and human edit.")
        return 0

    client = create_client(config.api_key, config.base_url, config.timeout)
    feedback = await generate_training_feedback(client, result.diffs, args.instructions, config.model_name)
    print(feedback)
    return 0


def cmd_history(args: argparse.Namespace, store: ProjectStore) -> int:
    """List, delete or export saved projects."""
    if args.history_command == "list":
        projects = store.list_projects()
        if not projects:
            print("No saved projects.")
        for p in projects:
            created = datetime.fromtimestamp(p.created_at / 1000).strftime("%Y-%m-%d %H:%M")
            kind = "training" if p.is_external_import else "project"
            translated = sum(1 for b in p.blocks if b.translated)
            print(f"{p.id}  {created}  {kind:<8}  {translated}/{len(p.blocks)}  {p.file_name}")
        return 0

    if args.history_command == "delete":
        store.delete(args.project_id)
        logger.info(f"Deleted project {args.project_id}")
        return 0

    project = store.get(args.project_id)
    if project is None:
        logger.error(f"Project not found: {args.project_id}")
        return 1
    save_srt(project.blocks, Path(args.output_path))
    return 0


async def main_async(args: argparse.Namespace) -> int:
    """Dispatch the selected command."""
    config = TranslatorConfig.from_args(args)
    store = ProjectStore(config.store_dir)

    if args.command == "history":
        return cmd_history(args, store)

    needs_api = args.command == "translate" or not args.no_feedback
    error = config.validate() if needs_api else None
    if error:
        logger.error(error)
        return 1

    try:
        if args.command == "translate":
            return await cmd_translate(args, config, store)
        return await cmd_train(args, config, store)
    except MmsubError as e:
        logger.error(str(e))
        return 1


def main(argv: List[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        exit_code = asyncio.run(main_async(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
