"""
optbind usage renderer.

render() turns a Syntax and the registered options into a rich renderable:

    <description, wrapped to the display width>
    usage: <cmd> <syntax>
    options:
     -h,--help            Print this help message
     -o,--output <out>    output file
    version: <version>
    online help:
    <url>

Palette keys
- usage-label, program-name, usage-section, description-section
- group-label, option-name, flag-name, metavar, argument-description
- footer-label, version, online-link, panel-title

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
import re
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

WIDTH = 74
"""Default display width of the help text."""


def render(syntax, options, version=None, /, *, width=WIDTH, colorful=True, fancy=False):
    """
    Build the help renderable for a command.

    Parameters
    - syntax: Syntax describing the command.
    - options: iterable of Opt, in display order.
    - version: version string for the footer (None renders as "unknown").
    - width: display width used for wrapping.
    - colorful: apply the palette.
    - fancy: wrap the whole help in a titled panel.

    Returns
    - a rich renderable (Group or Panel); nothing is printed.
    """
    console = Console(width=width)
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",

        "group-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "flag-name": "bold #22C55E",
        "metavar": "bold #FFD600",
        "argument-description": "#9CA3AF",

        "footer-label": "bold #FFFFFF",
        "version": "#737373",
        "online-link": "underline #36C5F0",

        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if isinstance(fragment, Text):
            return fragment.copy() if colorful else Text(fragment.plain)
        return Text(str(fragment), styler(style))

    def label(option):
        style = "option-name" if option.hasarg else "flag-name"
        label = Text(",").join(text(name, style) for name in option.names)
        if option.hasarg:
            metavar = option.metavar or re.sub(r"_+", "-", (option.name or "").lower().strip("_")) or "arg"
            label.append(" ").append(text("<%s>" % metavar, "metavar"))
        return label

    width -= 4 * fancy  # panel gutters
    renders = []

    # Free-text header
    if syntax.descr:
        renders.append(Text("\n").join(text(syntax.descr, "description-section").wrap(console, width)))

    # Usage line
    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(text(syntax.cmd, "program-name"))
    if syntax.syntax:
        usage.append(" ").append(text(syntax.syntax, "usage-section"))
    renders.append(usage)

    # Options, one per row with a hanging description column
    if options := list(options):
        padding = 1
        gap = 3
        labels = [label(option) for option in options]
        indent = min(max(map(len, labels)) + padding + gap, width // 2)

        section = Text()
        section.append(text("options", "group-label")).append(":")
        for option, name in zip(options, labels):
            row = Text(" " * padding).append(name)
            if len(row) + gap > indent:
                row.append("\n").append(" " * indent)
            else:
                row.append(" " * (indent - len(row)))
            wrapped = text(option.descr, "argument-description").wrap(console, max(width - indent, 1))
            row.append(Text("\n" + " " * indent).join(wrapped))
            section.append("\n").append(row)
        renders.append(section)

    # Footer
    footer = Text()
    footer.append(text("version", "footer-label")).append(": ")
    footer.append(text(version if version is not None else "unknown", "version"))
    if syntax.online:
        footer.append("\n").append(text("online help", "footer-label")).append(":\n")
        footer.append(text(syntax.online, "online-link"))
    renders.append(footer)

    renderable = Group(*renders)
    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{syntax.cmd} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
            width=width + 4,
        )
    return renderable


__all__ = (
    "WIDTH",
    "render",
)
