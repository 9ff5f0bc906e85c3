"""Command-line front end: encode PGM images to QTC and decode them back."""

from __future__ import annotations

import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from .decoder import decode_qtc
from .encoder import build_tree, write_qtc
from .pgm import PgmError, read_pgm, render_pixmap, save_pgm, write_grid
from .quadtree import QuadTree

MENU = (
    "Options disponibles :\n"
    "-h              : Affiche cette aide\n"
    "-c              : Mode encodeur\n"
    "-u              : Mode decodeur\n"
    "-i <file>       : Fichier d'entree (pgm ou qtc)\n"
    "-o <file>       : Rennomer fichier de sortie (pgm ou qtc)\n"
    "-g              : Activer grille de segmentation\n"
    "-v              : Mode bavard\n"
    "-a <float>      : Definir alpha\n"
)

DEFAULT_QTC_OUTPUT = "QTC/out.qtc"
DEFAULT_PGM_OUTPUT = "PGM/out.pgm"

_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class UsageError(Exception):
    """Raised for invalid command-line arguments or a mismatched mode."""


@dataclass
class Options:
    """Settings chosen on the command line."""

    encode: bool = False
    input_file: str = ""
    output_file: str = ""
    grid: bool = False
    verbose: bool = False
    alpha: float = 0.0
    show_help: bool = False


def _to_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group()) if match else 0.0


def parse_options(argv: Sequence[str]) -> Options:
    """Parse command-line arguments (without the program name)."""
    options = Options()
    args = iter(argv)
    for arg in args:
        if arg == "-h":
            options.show_help = True
            return options
        if arg == "-c":
            options.encode = True
        elif arg == "-u":
            options.encode = False
        elif arg == "-i":
            value = next(args, None)
            if value is None:
                raise UsageError("Erreur Manque fichier d'entree apres l'option -i")
            options.input_file = value
        elif arg == "-o":
            value = next(args, None)
            if value is None:
                raise UsageError("Erreur Manque fichier de sortie apres l'option -o")
            options.output_file = value
        elif arg == "-g":
            options.grid = True
        elif arg == "-v":
            options.verbose = True
        elif arg == "-a":
            value = next(args, None)
            if value is None:
                raise UsageError("Erreur Manque la valeur pour alpha après l'option -a")
            options.alpha = _to_float(value)
        else:
            raise UsageError(f"Option inconnue : {arg}")
    if not options.output_file:
        options.output_file = DEFAULT_QTC_OUTPUT if options.encode else DEFAULT_PGM_OUTPUT
    return options


def describe(options: Options) -> str:
    """Summarise the chosen settings, as shown in verbose mode."""
    mode = "Codage" if options.encode else "Décodage"
    lines = [
        "Parametres rentres :",
        f"Mode encodeur :  {mode}",
        f"Nom du fichier d'entree : {options.input_file}",
        f"Nom du fichier de sortie : {options.output_file}",
        "Aucun filtrage" if options.alpha == 0.0 else f"Filtrage avec alpha = {options.alpha:f}",
        "La grille de segmentation est activee"
        if options.grid
        else "La grille de segmentation est désactivee",
    ]
    return "\n".join(lines) + "\n"


def encode(options: Options) -> QuadTree:
    """Compress the input PGM image into the output QTC file; return the tree."""
    if not options.encode:
        raise UsageError("Erreur : le mode codeur n'est pas actif")
    if options.verbose:
        print(describe(options), end="")
    pixels, rows, cols = read_pgm(options.input_file)
    original_size = rows * cols * 8
    tree = QuadTree.for_image(rows, cols)
    build_tree(tree, pixels, rows)
    if options.alpha != 0.0:
        tree.filter(options.alpha, 1.0)
    if options.grid:
        grid_path = write_grid(tree, rows, cols, options.input_file)
        print(f"Image sauvegardee dans {grid_path}")
    print(options.output_file, end="")
    write_qtc(tree, options.output_file, original_size)
    print(f"Fichier QTC ecrit dans {options.output_file}")
    return tree


def decode(options: Options) -> bytearray:
    """Decode the input QTC file into the output PGM image; return its pixels."""
    if options.encode:
        raise UsageError("Erreur : le mode decodeur n'est pas actif")
    if options.verbose:
        print(describe(options), end="")
    tree = decode_qtc(options.input_file)
    size = 1 << tree.levels
    if options.grid:
        grid_path = write_grid(tree, size, size, options.output_file)
        print(f"Image sauvegardee dans {grid_path}")
    pixels = render_pixmap(tree, size, size)
    save_pgm(pixels, options.output_file, size, size)
    print(f"Image sauvegardee dans {options.output_file}")
    return pixels


def main(argv: Sequence[str] | None = None) -> int:
    """Run the codec from the command line and return an exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options = parse_options(args)
    except UsageError as exc:
        print(exc)
        return 1
    if options.show_help:
        print(MENU, end="")
        return 0
    try:
        if options.encode:
            encode(options)
        else:
            decode(options)
    except PgmError as exc:
        print(f"Erreur lors de la lecture de l'image : {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError, EOFError) as exc:
        print(f"Erreur : {exc}", file=sys.stderr)
        return 1
    return 0