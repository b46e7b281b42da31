"""Command line entry point.

    python -m docblog convert <document-id> [--language jp] [--no-upload] [--publish]
    python -m docblog translate <story.json> --languages FR DE [--schema schema.json]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from loguru import logger

from docblog.ai.gemini import GeminiCompletionService
from docblog.cms import StoryblokStore
from docblog.config import Settings
from docblog.logging_config import configure_logging
from docblog.metadata.extractor import MetadataExtractor
from docblog.pipeline import convert_document, publish_conversion
from docblog.richtext.converter import DocumentConverter
from docblog.richtext.policies import ConversionPolicy
from docblog.sources import GoogleDocsSource
from docblog.storage import S3ImageUploader
from docblog.translation.stories import DEFAULT_STORY_SCHEMAS, StorySchema, translate_story
from docblog.translation.translator import Translator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docblog", description=__doc__, formatter_class=argparse.RawTextHelpFormatter)
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert a Google Docs document to richtext and metadata")
    convert.add_argument("document_id")
    convert.add_argument("--language", choices=["en", "jp", "zh"], help="Skip language detection")
    convert.add_argument("--no-upload", action="store_true", help="Keep original image URIs")
    convert.add_argument("--publish", action="store_true", help="Create or update the blog story in the CMS")

    translate = subparsers.add_parser("translate", help="Translate a CMS story into other languages")
    translate.add_argument("story", type=Path, help="Story JSON as returned by the CMS")
    translate.add_argument("--languages", nargs="+", required=True, help="Target language codes, e.g. FR DE")
    translate.add_argument(
        "--schema",
        type=Path,
        help='JSON file {"schema": ..., "blok_templates": ..., "parent_ids": ...} for the story component',
    )
    return parser


async def run_convert(args: argparse.Namespace, settings: Settings) -> dict:
    store = StoryblokStore(settings) if args.publish else None
    completion = GeminiCompletionService(settings)
    source = GoogleDocsSource(settings)
    uploader = None if args.no_upload else S3ImageUploader(settings)
    converter = DocumentConverter(
        uploader=uploader,
        policy=ConversionPolicy(anchor_heading_level=settings.anchor_heading_level),
        owned_domain=settings.owned_domain,
    )
    extractor = MetadataExtractor(completion, settings)
    try:
        result = await convert_document(args.document_id, source, converter, extractor, args.language)
        output = result.to_dict()
        if store is not None:
            language = result.metadata.language
            story = await publish_conversion(
                store,
                result,
                slug_prefix=settings.blog_slug_prefixes.get(language, ""),
                parent_id=settings.blog_parent_ids.get(language),
            )
            output["story"] = {"id": story.get("id"), "full_slug": story.get("full_slug")}
    finally:
        await source.close()
        if store is not None:
            await store.close()
    return output


async def run_translate(args: argparse.Namespace, settings: Settings) -> list[dict]:
    story = json.loads(args.story.read_text(encoding="utf-8"))
    story = story.get("story", story)

    schemas = dict(DEFAULT_STORY_SCHEMAS)
    if args.schema:
        schema_file = json.loads(args.schema.read_text(encoding="utf-8"))
        component = (story.get("content") or {}).get("component")
        schemas[component] = StorySchema(
            schema=schema_file["schema"],
            blok_templates=schema_file.get("blok_templates", {}),
            parent_ids=schema_file.get("parent_ids", {}),
        )

    translator = Translator(
        GeminiCompletionService(settings),
        model=settings.translation_model,
        temperature=settings.translation_temperature,
    )
    stories = await translate_story(
        story,
        args.languages,
        translator,
        site_url=settings.site_url,
        signup_url=settings.app_signup_url,
        schemas=schemas,
    )
    return [{"lng": s.language, "story": s.story} for s in stories]


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(Path(settings.log_dir))

    handlers = {
        "convert": run_convert,
        "translate": run_translate,
    }
    try:
        output = asyncio.run(handlers[args.command](args, settings))
    except Exception as e:
        logger.exception(f"{args.command} failed: {e}")
        return 1

    json.dump(output, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
