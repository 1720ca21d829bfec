"""CLI entry point for webnotes."""

from pathlib import Path
from typing import Callable, Optional

import click

from .config import Config, load_config
from .exceptions import ConfigError, FetchError, WebnotesError
from .extract import content_images, content_links, content_p, content_text, content_title
from .fetch import get_page, head
from .files import FileSelector, find_webnote_files, open_out_document
from .index import IndexBuilder
from .matcher import MATCHABLE_NAMES, SectionMatcher
from .models import URL_SCHEMES, Document, Section
from .parser import load_document
from .serializer import format_section, save_document
from .utils import get_tags, normalize_note_string
from .web import create_app

# Fields that --v<name> sets to a single value.
VALUE_FIELDS = ("author", "date", "description", "title")

# Parts of a section that clear can remove.
PART_NAMES = ("author", "body", "date", "description", "error", "status", "tags", "title")

# Ways of turning a fetched page into a section body.
CAPTURE_MODES = {
    "images": content_images,
    "links": content_links,
    "p": content_p,
    "text": content_text,
}


class WebnotesGroup(click.Group):
    """Reports webnotes and filesystem errors without a traceback."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except ConfigError as e:
            click.echo(f"Configuration error: {e}", err=True)
            ctx.exit(2)
        except (WebnotesError, OSError) as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


def _options(*decorators):
    def apply(f):
        for decorator in reversed(decorators):
            f = decorator(f)
        return f
    return apply


file_options = _options(
    click.option("--dir", "directory", default=None, help="Only files directly in this directory"),
    click.option("--file", "file_path", default=None, help="Only this file"),
)

_selector_options = []
for _name in MATCHABLE_NAMES:
    _selector_options.append(
        click.option(f"--e{_name}", default=None, help=f"{_name} equals this value")
    )
    _selector_options.append(
        click.option(f"--m{_name}", default=None, help=f"{_name} matches this pattern")
    )

selection_options = _options(
    file_options,
    click.option("--note", is_flag=True, default=False, help="Only match notes"),
    click.option("--url", is_flag=True, default=False, help="Only match bookmarks"),
    *_selector_options,
)

out_file_option = click.option(
    "--out-file", required=True, type=click.Path(dir_okay=False), help="Webnote file to write to"
)

value_options = _options(
    click.option("--vauthor", default=None, help="Author of the webnote"),
    click.option("--vbody", default=None, help="Body of the webnote"),
    click.option("--vdate", default=None, help="Date of the webnote"),
    click.option("--vdescription", default=None, help="Description of the webnote"),
    click.option("--vtags", default=None, help="Comma separated tags"),
    click.option("--vtitle", default=None, help="Title of the webnote"),
    click.option("--date", "stamp_date", is_flag=True, default=False, help="Set the date to today"),
)

capture_options = _options(
    click.option("--images", is_flag=True, default=False, help="Capture images from the url as Markdown"),
    click.option("--links", is_flag=True, default=False, help="Capture links from the url as Markdown"),
    click.option("--p", is_flag=True, default=False, help="Capture the text inside <p></p> tags"),
    click.option("--text", is_flag=True, default=False, help="Capture all text from the url"),
    click.option("--title", is_flag=True, default=False, help="Capture the page title"),
)


def _file_selector(options: dict) -> FileSelector:
    return FileSelector(options.get("directory"), options.get("file_path"))


def _section_matcher(options: dict) -> SectionMatcher:
    return SectionMatcher.from_options(
        note=options.get("note", False),
        url=options.get("url", False),
        equal_values={name: options.get(f"e{name}") for name in MATCHABLE_NAMES},
        patterns={name: options.get(f"m{name}") for name in MATCHABLE_NAMES},
    )


def _selected_files(config: Config, options: dict, exclude: Optional[Path] = None) -> list[Path]:
    selector = _file_selector(options)
    files = selector.select(find_webnote_files(config.root, config.index_path))
    if exclude is not None:
        files = [f for f in files if (config.root / f).resolve() != exclude.resolve()]
    return files


def for_each_match(
    config: Config,
    options: dict,
    action: Callable[[Document, Section], None],
    save: bool = True,
    exclude: Optional[Path] = None,
) -> int:
    """Apply action to every matching section in the selected files.

    Files with at least one match are written back when save is set.
    Returns the number of matched sections.
    """
    matcher = _section_matcher(options)
    count = 0
    for relative in _selected_files(config, options, exclude):
        document = load_document(config.root / relative)
        matched = matcher.matching_sections(document)
        for section in matched:
            action(document, section)
        if matched and save:
            save_document(document)
            if config.verbose:
                click.echo(f"Updated {relative} ({len(matched)} sections)")
        count += len(matched)
    return count


def _capture(config: Config, section: Section, options: dict, fill: bool = False) -> None:
    """Fetch the section's page and set its body and title from it.

    Fetch failures are recorded on the section and do not stop the command.
    """
    modes = [mode for mode in CAPTURE_MODES if options.get(mode)]
    if not section.url or not (modes or options.get("title")):
        return
    try:
        page = get_page(section, timeout=config.http_timeout)
    except FetchError as e:
        if config.verbose:
            click.echo(f"  Warning: {e}", err=True)
        return
    set_body = section.fill_body if fill else section.set_body
    for mode in modes:
        set_body(CAPTURE_MODES[mode](page))
    if options.get("title"):
        set_value = section.fill_field_value if fill else section.set_field_value
        set_value("title", content_title(page))


def _out_document(config: Config, out_file: str) -> Document:
    return open_out_document(config.root / out_file)


@click.group(cls=WebnotesGroup)
@click.option("--root", type=click.Path(file_okay=False), default=None,
              help="Directory holding the webnote files (default: WEBNOTES_ROOT or cwd)")
@click.option("--index-path", default=None, help="Index directory name (default: wn_index)")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output")
@click.version_option(package_name="webnotes")
@click.pass_context
def main(ctx, root, index_path, verbose):
    """Manage notes and bookmarks kept in .wn files.

    Commands select sections with --note/--url, --e<name> (equals) and
    --m<name> (pattern) options, then act on every matching section.

    Example: webnotes tag --ehost example.com --vtags reading
    """
    ctx.obj = load_config(root=root, index_path=index_path, verbose=verbose)


@main.command()
@out_file_option
@click.option("--vnote", default=None, help="Note string of a new note")
@click.option("--vurl", default=None, help="URL of a new bookmark")
@value_options
@capture_options
@click.pass_obj
def add(config: Config, out_file, vnote, vurl, **options):
    """Add a note or bookmark to --out-file."""
    note = normalize_note_string(vnote or "")
    if not note and not vurl:
        raise ConfigError("Must specify --vnote or --vurl")
    if note and vurl:
        raise ConfigError("Can only specify one of --vnote and --vurl")
    if vurl and not vurl.startswith(URL_SCHEMES):
        raise ConfigError("--vurl must start with http:// or https://")
    out = _out_document(config, out_file)
    section = Section(note=note, url=vurl or "")
    if options["stamp_date"]:
        section.set_date()
    for name in VALUE_FIELDS:
        if options[f"v{name}"]:
            section.set_field_value(name, options[f"v{name}"])
    if options["vbody"]:
        section.set_body([options["vbody"]])
    section.set_tags(get_tags(options["vtags"] or ""))
    _capture(config, section, options)
    out.add(section)
    save_document(out)


@main.command()
@selection_options
@click.option("--vbody", required=True, help="Line to append to the body")
@click.pass_obj
def append(config: Config, vbody, **options):
    """Append a line to the bodies of matching sections."""
    def action(document, section):
        if section.body:
            section.append_body("")
        section.append_body(vbody)

    for_each_match(config, options, action)


@main.command()
@selection_options
@click.option("--all", "clear_all", is_flag=True, default=False, help="All fields and the body")
@click.option("--author", is_flag=True, default=False, help="Author field")
@click.option("--body", is_flag=True, default=False, help="Body")
@click.option("--date", is_flag=True, default=False, help="Date field")
@click.option("--description", is_flag=True, default=False, help="Description field")
@click.option("--error", is_flag=True, default=False, help="Error field")
@click.option("--status", is_flag=True, default=False, help="Status field")
@click.option("--tags", is_flag=True, default=False, help="Tags field")
@click.option("--title", is_flag=True, default=False, help="Title field")
@click.pass_obj
def clear(config: Config, clear_all, **options):
    """Remove fields and/or bodies from matching sections."""
    parts = [name for name in PART_NAMES if options.pop(name)]

    def action(document, section):
        if clear_all:
            section.delete_all()
        for name in parts:
            if name == "body":
                section.delete_body()
            else:
                section.delete_field(name)

    for_each_match(config, options, action)


@main.command()
@selection_options
@out_file_option
@click.pass_obj
def copy(config: Config, out_file, **options):
    """Copy matching sections to --out-file."""
    out = _out_document(config, out_file)
    for_each_match(config, options, lambda document, section: out.add(section),
                   save=False, exclude=Path(out.path))
    save_document(out)


@main.command()
@selection_options
@out_file_option
@click.pass_obj
def move(config: Config, out_file, **options):
    """Move matching sections to --out-file."""
    out = _out_document(config, out_file)

    def action(document, section):
        out.add(section)
        document.delete(section)

    for_each_match(config, options, action, exclude=Path(out.path))
    save_document(out)


@main.command()
@selection_options
@click.pass_obj
def delete(config: Config, **options):
    """Delete matching sections."""
    count = for_each_match(config, options, lambda document, section: document.delete(section))
    if config.verbose:
        click.echo(f"Deleted {count} sections")


@main.command()
@selection_options
@click.pass_obj
def duplicates(config: Config, **options):
    """Print notes and bookmarks that appear more than once."""
    found: dict[str, tuple[tuple[int, str], list[str]]] = {}

    def action(document, section):
        relative = Path(document.path).relative_to(config.root).as_posix()
        key = section.id()
        if key not in found:
            found[key] = (section.sort_key(), [])
        found[key][1].append(relative)

    for_each_match(config, options, action, save=False)
    for key, (_, files) in sorted(found.items(), key=lambda item: item[1][0]):
        if len(files) > 1:
            click.echo(f"{','.join(files)}: {key}")


def _set_or_fill(config: Config, options: dict, fill: bool) -> None:
    tags = get_tags(options["vtags"] or "")

    def action(document, section):
        if options["stamp_date"]:
            if fill:
                section.fill_date()
            else:
                section.set_date()
        for name in VALUE_FIELDS:
            value = options[f"v{name}"]
            if not value:
                continue
            if fill:
                section.fill_field_value(name, value)
            else:
                section.set_field_value(name, value)
        if options["vbody"]:
            if fill:
                section.fill_body([options["vbody"]])
            else:
                section.set_body([options["vbody"]])
        if tags:
            if fill:
                section.add_tags(tags)
            else:
                section.set_tags(tags)
        _capture(config, section, options, fill=fill)

    for_each_match(config, options, action)


@main.command()
@selection_options
@value_options
@capture_options
@click.pass_obj
def fill(config: Config, **options):
    """Set values on matching sections only where they are missing."""
    _set_or_fill(config, options, fill=True)


@main.command(name="set")
@selection_options
@value_options
@capture_options
@click.pass_obj
def set_(config: Config, **options):
    """Set values on matching sections."""
    _set_or_fill(config, options, fill=False)


@main.command(name="format")
@file_options
@click.pass_obj
def format_(config: Config, **options):
    """Rewrite webnote files in the standard format."""
    for relative in _selected_files(config, options):
        save_document(load_document(config.root / relative))
        if config.verbose:
            click.echo(f"Formatted {relative}")


@main.command(name="head")
@selection_options
@click.pass_obj
def head_(config: Config, **options):
    """Check that matching bookmarks are reachable (HTTP HEAD)."""
    def action(document, section):
        if not section.url:
            return
        head(section, timeout=config.http_timeout)
        if config.verbose:
            outcome = section.field_value("error") or section.field_value("status") or "ok"
            click.echo(f"  {section.url}: {outcome}")

    for_each_match(config, options, action)


@main.command(name="http")
@click.option("--host", default=None, help="Address to listen on (default: 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Port to listen on (default: 8080)")
@click.pass_obj
def http_(config: Config, host, port):
    """Serve the webnotes and the index for browsing."""
    app = create_app(config)
    host = host or config.http_host
    port = port or config.http_port
    click.echo(f"Serving {config.root} on http://{host}:{port}/")
    app.run(host=host, port=port)


@main.command()
@click.pass_obj
def index(config: Config):
    """Rebuild the index of authors, hosts, notes and tags."""
    result = IndexBuilder(config.root, config.index_path, verbose=config.verbose).build()
    if config.verbose:
        counts = ", ".join(f"{n} {category}" for category, n in result.groups.items())
        click.echo(f"Indexed {result.sections} sections in {result.files} files: {counts}")


@main.command()
@selection_options
@click.pass_obj
def matches(config: Config, **options):
    """Print matching sections."""
    for_each_match(config, options, lambda document, section: click.echo(format_section(section)),
                   save=False)


@main.command()
@selection_options
@click.option("--vtags", required=True, help="Comma separated tags to add")
@click.pass_obj
def tag(config: Config, vtags, **options):
    """Add tags to matching sections."""
    tags = get_tags(vtags)
    for_each_match(config, options, lambda document, section: section.add_tags(tags))


@main.command()
@selection_options
@click.option("--vtags", required=True, help="Comma separated tags to remove")
@click.pass_obj
def untag(config: Config, vtags, **options):
    """Remove tags from matching sections."""
    tags = get_tags(vtags)
    for_each_match(config, options, lambda document, section: section.delete_tags(tags))
