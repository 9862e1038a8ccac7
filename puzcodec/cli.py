import logging
import os
import sys
import textwrap

from . import config
from . import printer
from .errors import PuzzleError
from .puzzle import read

COMMANDS = ('info', 'verify', 'print', 'check', 'reveal', 'lock', 'unlock')

# commands that change the puzzle and write it back out
WRITING_COMMANDS = ('reveal', 'lock', 'unlock')


def describe(puz):
    lines = [
        'title:     {}'.format(puz.title),
        'author:    {}'.format(puz.author),
        'copyright: {}'.format(puz.copyright),
        'size:      {}x{}'.format(puz.width, puz.height),
        'clues:     {} ({} across, {} down)'.format(
            puz.n_clues, len(puz.across_clues), len(puz.down_clues)),
        'version:   {}'.format(puz.fileversion.rstrip(b'\0').decode('ascii', 'replace')),
        'scrambled: {}'.format('yes' if puz.is_scrambled() else 'no'),
        'extras:    {}'.format(' '.join(
            code.decode('ascii') for code in sorted(puz.extras)
            if not puz.extras[code].synthesized) or '-'),
    ]
    if puz.ltim is not None:
        lines.append('timer:     {} ({})'.format(
            puz.ltim.display_format().strip(),
            'running' if puz.ltim.is_running else 'stopped'))
    return lines


def run(cfg):
    puz = read(cfg.filename, encoding_errors=cfg.encoding_errors)
    command = cfg.command

    if command == 'info':
        print('\n'.join(describe(puz)))
    elif command == 'verify':
        # read() has already verified everything
        print('{}: ok'.format(cfg.filename))
    elif command == 'print':
        style = ('solution' if cfg.solution
                 else 'blank' if cfg.blank
                 else None)
        printer.printer_output(puz, style=style, width=cfg.print.width,
                               downs_only=cfg.print.downs_only)
    elif command == 'check':
        result = puz.check_all()
        print({None: 'unknown', True: 'correct', False: 'incorrect'}[result])
    elif command == 'reveal':
        if puz.reveal_all() is None:
            sys.exit('Puzzle is scrambled; unlock it before revealing.')
    elif command in ('lock', 'unlock'):
        if cfg.key is None:
            sys.exit('A --key is needed to {} a puzzle.'.format(command))
        if command == 'lock':
            puz.lock_solution(cfg.key)
        elif not puz.unlock_solution(cfg.key):
            sys.exit('Key {} does not unlock {}.'.format(cfg.key, cfg.filename))

    if command in WRITING_COMMANDS:
        output = cfg.output or cfg.filename
        puz.save(output)
        logging.getLogger(__name__).info('wrote %s', output)


def main(args=None):
    version_dir = os.path.abspath(os.path.dirname(__file__))
    version_file = os.path.join(version_dir, 'version')
    with open(version_file) as f:
        version = f.read().strip()

    cfgparser = config.build_parser(
        config_dirs=config.CONFIG_DIRS,
        prog='puzcodec',
        description=textwrap.dedent("""\
            Read, verify and edit crossword puzzles in the AcrossLite .puz
            format."""))
    argparser = cfgparser.get_argument_parser()
    argparser.add_argument('command', choices=COMMANDS)
    argparser.add_argument('filename', metavar='PUZfile',
                           help='path of puzzle file in the .puz format')
    argparser.add_argument('-o', '--output', metavar='PUZfile',
                           help="""where reveal, lock and unlock write the
                           puzzle (default: overwrite the input)""")

    print_fill = argparser.add_mutually_exclusive_group()
    print_fill.add_argument('--blank', action='store_true', help="""\
        print the puzzle grid with no answers""")
    print_fill.add_argument('--solution', action='store_true', help="""\
        print the puzzle grid with the solution filled in""")
    argparser.add_argument('--version', action='version', version=version)

    cfg = cfgparser.parse_cfg(args)
    config.configure_logging(cfg)

    try:
        run(cfg)
    except PuzzleError as e:
        sys.exit('Unable to use {} as a .puz file: {}'.format(
            cfg.filename, e.message))
    except OSError as e:
        sys.exit('Unable to open {}: {}'.format(cfg.filename, e.strerror))
