import logging

from pathlib import Path


ver: str = ''
# configured by runner.Runner.init_logger()
log: logging.Logger = logging.getLogger('confprime')

# path to the confprime checkout (remove 'confprime/')
confprime_path = Path(__file__).parent.parent.absolute()
# path to the package itself, where cfg.json and templates live
pkg_path = Path(__file__).parent.absolute()

