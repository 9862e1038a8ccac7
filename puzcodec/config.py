"""Settings for the puzcodec command line tool.

Settings come from a TOML file named "puzcodec.toml", found either in the
current working directory or in ~/.config, with the former overriding the
latter. Files do not merge: the first one found is used. For example:

    encoding_errors = "replace"
    verbose_log = true
    key = 1234

    [print]
    width = 80
    downs_only = false

Any registered parameter can be overridden on the command line, using hyphens
in place of underscores and dots for TOML sections:

    puzcodec print --print.width=120 --no-verbose-log puzzle.puz

Boolean parameters accept --name and --no-name flags. Parameters that aren't
registered are still readable from the file but can't be overridden.
"""

import argparse
import collections.abc
import logging
import os.path
import toml


CONFIG_FNAME = 'puzcodec.toml'

# The search path for configuration files, as an ordered list of directories.
CONFIG_DIRS = ['.', '~/.config']

LOG_FNAME = 'puzcodec.log'


class ConfigNamespace:
    """A sub-tree of settings, read through attribute access.

    Missing settings read as None.
    """

    def __init__(self):
        # A key is a str. A value is either a raw value or a ConfigNamespace
        # instance.
        self._dict = {}

    def _set(self, path, value):
        # A dotted key names a value inside a section.
        head, dot, rest = path.partition('.')
        if dot:
            self._dict.setdefault(head, ConfigNamespace())._set(rest, value)
            return

        if isinstance(value, collections.abc.Mapping):
            child = self._dict.setdefault(path, ConfigNamespace())
            child._merge(value)
            return

        self._dict[path] = value

    def _merge(self, mapping_value):
        for k in mapping_value:
            self._set(k, mapping_value[k])

    def _get(self, path):
        head, dot, rest = path.partition('.')
        value = self._dict.get(head)
        if dot:
            return value._get(rest) if isinstance(value, ConfigNamespace) else None
        return value

    def __getattr__(self, name):
        return self._dict.get(name)

    def __repr__(self):
        return '[ConfigNamespace: ' + repr(self._dict) + ']'


class ConfigParameter:
    def __init__(self, name, is_flag=False, default=None):
        self.name = name
        self.is_flag = is_flag
        self.default = default

    @property
    def key(self):
        # argparse and the TOML file both use underscores
        return self.name.replace('-', '_')


class ConfigParser:
    def __init__(
            self,
            config_fname=CONFIG_FNAME,
            config_dirs=CONFIG_DIRS,
            *args,
            **kwargs):
        """Initializes the settings reader.

        Args:
            config_fname: The TOML filename of the config file.
            config_dirs: The config file search path, as a list of directory
                paths.
            *args, **kwargs: Passed on to argparse.ArgumentParser.
        """
        self.config_fname = config_fname
        self.config_dirs = config_dirs

        self._argparser = argparse.ArgumentParser(*args, **kwargs)
        self._params = []

    def add_parameter(self, name, default=None, type=str, help=None):
        """Registers a setting that can be overridden on the command line.

        Args:
            name: The TOML path of the setting, with hyphens for
                underscores and dots for sections.
            default: Used when neither the command line nor the file sets it.
            type: str, int, or bool. A bool gets --name and --no-name flags.
            help: Description for argparse's help messages.
        """
        if type == bool:
            self._params.append(
                ConfigParameter(name, is_flag=True, default=default))
            group = self._argparser.add_mutually_exclusive_group()
            group.add_argument('--' + name, action='store_true',
                               default=None, help=help)
            group.add_argument('--no-' + name, action='store_false',
                               dest=name.replace('-', '_'), default=None,
                               help=argparse.SUPPRESS)
        else:
            self._params.append(ConfigParameter(name, default=default))
            self._argparser.add_argument(
                '--' + name, type=type, required=False, help=help)

    def get_argument_parser(self):
        return self._argparser

    def find_config_file(self):
        for dpath in self.config_dirs:
            cfgpath = os.path.normpath(
                os.path.expanduser(
                    os.path.join(dpath, self.config_fname)))
            if os.path.isfile(cfgpath):
                return cfgpath
        return None

    def parse_cfg(self, args=None):
        """Reads the config file, then applies command line overrides.

        Args:
            args: Command line arguments; sys.argv by default.

        Returns:
            A ConfigNamespace holding file settings, overrides, defaults and
            any positional arguments.
        """
        namespace = ConfigNamespace()

        # Use only the first file on the lookup path.
        cfgpath = self.find_config_file()
        if cfgpath is not None:
            with open(cfgpath) as infh:
                namespace._merge(toml.loads(infh.read()))

        parsed = self._argparser.parse_args(args=args)
        namespace._merge(dict(
            i for i in vars(parsed).items() if i[1] is not None))

        for param in self._params:
            if namespace._get(param.key) is None and param.default is not None:
                namespace._set(param.key, param.default)

        return namespace


def build_parser(config_dirs=CONFIG_DIRS, **kwargs):
    """A ConfigParser with every setting the command line tool reads."""
    cfgparser = ConfigParser(CONFIG_FNAME, config_dirs, **kwargs)
    cfgparser.add_parameter(
        'encoding-errors', default='strict', type=str,
        help="how to handle undecodable text: 'strict' or 'replace'")
    cfgparser.add_parameter(
        'verbose-log', default=False, type=bool,
        help='log informational messages as well as warnings')
    cfgparser.add_parameter(
        'log-to-file', default=False, type=bool,
        help='write the log to {} instead of stderr'.format(LOG_FNAME))
    cfgparser.add_parameter(
        'key', type=int, help='four-digit key for lock and unlock')
    cfgparser.add_parameter(
        'print.width', default=92, type=int,
        help='maximum width in characters of printed output')
    cfgparser.add_parameter(
        'print.downs-only', default=False, type=bool,
        help='print only the down clues')
    return cfgparser


def configure_logging(cfg):
    level = logging.INFO if cfg.verbose_log else logging.WARNING
    if cfg.log_to_file:
        logging.basicConfig(filename=LOG_FNAME, encoding='utf-8', level=level)
    else:
        logging.basicConfig(level=level)
