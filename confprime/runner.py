import argparse
import json
import logging
import logging.config
import logging.handlers

from pathlib import Path
from typing import Any, Optional

import tomli

import confprime as cp

from . import templates
from .experiment import ConsoleResponder, Exper, State
from .sender import Sender


def load_config(user_cfg_path: Optional[str] = None) -> dict[str, Any]:
    with open(cp.pkg_path / 'cfg.json') as f:
        cfg = json.load(f)
    if user_cfg_path:
        with open(Path(user_cfg_path).resolve(True)) as f:
            user_cfg = json.load(f)
        cfg.update(user_cfg)
    return cfg


def read_version() -> str:
    pyproj_path = cp.confprime_path / 'pyproject.toml'
    if not pyproj_path.is_file():
        return ''
    with open(pyproj_path, 'rb') as f:
        pyproj = tomli.load(f)
    return pyproj['project']['version']


class Runner:

    _args: argparse.Namespace
    cfg: dict[str, Any]
    logfile: Path

    def __init__(self, args: argparse.Namespace):
        self._args = args
        self.cfg = load_config(args.config)
        # command line options take precedence over config files
        for key, arg in [('save_url', args.save_url),
                         ('condition_prefix', args.condition),
                         ('trial_list', args.trial_list)]:
            if arg:
                self.cfg[key] = arg

        self.init_logger()
        cp.log.info('=== starting confprime ===')
        cp.log.info(f'logs saved to {self.logfile}')

        cp.ver = read_version()
        cp.log.info(f'confprime version: {cp.ver}')
        cp.log.info(f'saving data to {self.cfg["save_url"]}')

        if self.cfg.get('templates_dir'):
            templates.set_override_path(Path(self.cfg['templates_dir']))

    def init_logger(self):
        logfile = Path(self.cfg['logfile'])
        self.logfile = logfile if logfile.is_absolute() \
            else cp.confprime_path / logfile
        self.logfile.parent.mkdir(parents=True, exist_ok=True)
        config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'basic': {
                    'format': '%(message)s'
                },
                'extended': {
                    'format': '[%(asctime)s] %(levelname)s in %(module)s: %(message)s',
                }
            },
            'handlers': {
                'stderr': {
                    'class': 'logging.StreamHandler',
                    'stream': 'ext://sys.stderr',
                    'formatter': 'basic',
                    # participants never see save failures
                    'level': 'INFO' if self._args.dummy else 'CRITICAL'
                },
                'file': {
                    'class': 'logging.handlers.RotatingFileHandler',
                    'filename': str(self.logfile),
                    'maxBytes': int(self.cfg['logfile_max_size_kib'])*1024,
                    'backupCount': int(self.cfg['logfile_num_backups']),
                    'formatter': 'extended',
                    'level': 'DEBUG'
                },
            },
            'root': {
                'level': 'DEBUG',
                'handlers': ['stderr', 'file']
            }
        }
        logging.config.dictConfig(config)

    def start(self):
        with Sender.from_cfg(self.cfg) as sender:
            if self._args.dummy:
                cp.log.info('performing dummy run')
                Exper.dummy_run(self._args.dummy, self.cfg, sender,
                                realtime=self._args.realtime)
                return 0
            inst = Exper(self.cfg, sender)
            state = inst.run(ConsoleResponder(inst.clock))
        return 0 if state == State.COMPLETE else 1
