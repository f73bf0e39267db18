import argparse
import sys

from confprime import runner


def parse_args(argv=None):
    allargs = [
        [['-f', '--config'], {'help': 'path to config file'}],
        [['-u', '--save_url'], {
            'help': 'URL of the endpoint that data lines are posted to'}],
        [['-c', '--condition'], {
            'help': 'condition prefix for output file names'}],
        [['-t', '--trial_list'], {
            'help': 'CSV trial list (path, or name of a bundled list)'}],
        [['-D', '--dummy'], {
            'type': int,
            'help': 'perform a dummy run with the given participant count'}],
        [['-R', '--realtime'], {
            'action': 'store_true',
            'help': 'dummy runs wait out partner delays in real time'}],
    ]
    parser = argparse.ArgumentParser()
    for arg in allargs:
        parser.add_argument(*arg[0], **arg[1])
    args = parser.parse_args(argv)
    if args.realtime and not args.dummy:
        parser.error('--realtime requires --dummy')
    return args


def main(argv=None):
    return runner.Runner(parse_args(argv)).start()


if __name__ == '__main__':
    sys.exit(main())
