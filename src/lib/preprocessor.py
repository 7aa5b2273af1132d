"""
Markdown preprocessor orchestrator.

Runs the passes in a fixed order over one note:

    1. frontmatter    extract, merge tags/title, keep/strip/synthesize
    2. tags           inline hashtags (when metadata extraction is enabled)
    3. email blocks   ```email fences -> #email-block(...)
    4. link filter    app-only links removed
    5. embeds         ![[...]] -> markers or descriptive links
    6. wikilinks      [[...]] -> markdown links
    7. callouts       > [!type] -> styled blockquotes
    8. word count and title back-fill

Embeds must precede wikilinks, and frontmatter must precede tags so that
frontmatter tags come first and inline duplicates are dropped.

process() never raises for a document: failures land in result.errors and
the partially processed content is returned.
"""

from typing import Optional

from ..config.options import PreprocessorOptions, WikilinkConfig
from ..models.preprocess import PreprocessingResult
from .callouts import CalloutConverter
from .embeds import EmbedResolver
from .emailblock import EmailBlockConverter
from .frontmatter import FrontmatterProcessor
from .links import links_filter
from .log import LOG
from .metadata import tags_extract, title_extract, wordCount_calculate
from .wikilinks import WikilinkResolver


class Preprocessor:
    """
    Converts one note at a time to normalized markdown.

    The pass objects hold only configuration, so one Preprocessor can be
    used for many documents (and from several threads).

    Example:
        >>> pre = Preprocessor()
        >>> pre.process("See [[Other Note]] #todo").metadata.tags
        ['todo']
    """

    def __init__(
        self,
        options: Optional[PreprocessorOptions] = None,
        wikilink_config: Optional[WikilinkConfig] = None,
        defer_images: bool = True,
    ):
        self.options = options or PreprocessorOptions.from_settings()
        self.wikilink_config = wikilink_config or WikilinkConfig.from_settings()

        self.frontmatter = FrontmatterProcessor(self.options)
        self.emailblocks = EmailBlockConverter()
        self.embeds = EmbedResolver(defer_images=defer_images)
        self.wikilinks = WikilinkResolver(self.wikilink_config, base_url=self.options.base_url)
        self.callouts = CalloutConverter()

    def process(self, raw: str) -> PreprocessingResult:
        """
        Run all passes over `raw`.

        Args:
            raw: Note text as authored

        Returns:
            PreprocessingResult with content, metadata, errors and warnings
        """
        result = PreprocessingResult(content=raw)

        try:
            result.content = self.frontmatter.frontmatter_process(result.content, result)

            if self.options.include_metadata:
                for tag in tags_extract(result.content):
                    result.metadata.tag_add(tag)
                LOG(f"Tags: {result.metadata.tags}", level=2)

            result.content = self.emailblocks.emailBlocks_convert(result.content, result)
            result.content = links_filter(result.content, result)
            result.content = self.embeds.embeds_convert(result.content, result)
            result.content = self.wikilinks.wikilinks_convert(result.content, result)
            result.content = self.callouts.callouts_convert(result.content, result)

            result.metadata.word_count = wordCount_calculate(result.content)
            if not result.metadata.title:
                result.metadata.title = title_extract(result.content)
        except Exception as e:
            result.errors.append(f"Processing error: {e}")
            LOG(f"Processing aborted: {e}", level=1)

        LOG(
            f"Processed note: {result.metadata.word_count} words, "
            f"{len(result.warnings)} warnings, {len(result.errors)} errors",
            level=2,
        )
        return result
