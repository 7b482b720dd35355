import argparse
import asyncio
import logging
import os
import sys

from release_sigcheck import __version__
from release_sigcheck.releases import (
    InvalidGraph,
    VersionParseFailure,
    parse_graph,
    parse_tracked_versions,
)
from release_sigcheck.signing import MirrorSignatureVerifier
from release_sigcheck.signing.mirror.verifier import (
    BASE_URL,
    DEFAULT_TIMEOUT_SECS,
    MAX_SIGNATURES,
)

__copyright__ = "(c) 2022 Red Hat, Inc."
__license__ = "MIT"


class ReleaseSigcheckCLI:
    def __init__(self, args):
        self.logger = logging.getLogger(__name__)
        self.logger.debug("Parsing args: %s", str(args))
        self.args = self.parse_args(args)
        logformat = "[%(asctime)s] %(levelname)s:%(name)s:%(message)s"
        logging.basicConfig(
            level=self.args.loglevel,
            stream=sys.stdout,
            format=logformat,
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def run_command(self):
        """
        parse_args() will set self.args.func() to the function we wish to
        execute, based on the subcommand the user ran. These 'action functions'
        will return the integer exit code with which we exit at the very end.

        Roughly:
        0 = success
        1 = error (e.g. file missing, couldn't parse the graph or a version, etc.)
        3 = signature verification failed
        """
        return self.args.func()

    def parse_args(self, args):
        """
        Parse command line parameters

        Args:
          args (List[str]): command line parameters as list of strings
              (for example  ``["--help"]``).

        Returns:
          :obj:`argparse.Namespace`: command line parameters namespace
        """

        parser = argparse.ArgumentParser(
            description="Check that releases have published signatures"
        )
        parser.add_argument(
            "--version",
            action="version",
            version="release-sigcheck {ver}".format(ver=__version__),
        )
        parser.add_argument(
            "--debug",
            help="Print a bunch of debug info",
            action="store_const",
            dest="loglevel",
            const=logging.DEBUG,
        )
        parser.add_argument(
            "--nocolor",
            help="Disable color output",
            required=False,
            dest="nocolor",
            default=True if len(os.environ.get("NO_COLOR", "")) else False,
            action="store_true",
        )

        input_type_parser = parser.add_subparsers(
            required=True, dest="input_type", metavar="INPUT_TYPE"
        )

        graph = input_type_parser.add_parser(
            "graph",
            help="Act on a release graph document",
        )
        graph_commands = graph.add_subparsers(required=True, dest="command")

        # command: check
        cmd_check = graph_commands.add_parser(
            "check",
            help="Check that every tracked release in the graph has a signature",
        )
        cmd_check.set_defaults(func=self.check)
        cmd_check.add_argument(
            "--track",
            help=(
                "A version to check signatures for. May be given more than once. (default: every version in the graph)"
            ),
            required=False,
            metavar="VERSION",
            dest="tracked",
            action="append",
            default=None,
        )
        cmd_check.add_argument(
            "--strict-versions",
            help="Abort if any release in the graph has an unparsable version",
            required=False,
            dest="strict_versions",
            default=False,
            action="store_true",
        )
        cmd_check.add_argument(
            "--base-url",
            help=f"The signature mirror to look in. (default: {BASE_URL})",
            required=False,
            metavar="URL",
            dest="base_url",
            default=BASE_URL,
        )
        cmd_check.add_argument(
            "--timeout",
            help=f"Per-request timeout in seconds. (default: {DEFAULT_TIMEOUT_SECS})",
            required=False,
            metavar="SECONDS",
            dest="timeout",
            type=float,
            default=DEFAULT_TIMEOUT_SECS,
        )
        cmd_check.add_argument(
            "--max-signatures",
            help=(
                f"Look for signature-1 up to (but excluding) this index. (default: {MAX_SIGNATURES})"
            ),
            required=False,
            metavar="N",
            dest="max_signatures",
            type=int,
            default=MAX_SIGNATURES,
        )
        cmd_check.add_argument(
            "graph_file",
            help="The release graph JSON document, or - to read it from stdin",
            metavar="GRAPH_FILE",
        )
        return parser.parse_args(args)

    def _error(self, msg):
        if self.args.nocolor:
            print(f"[ERROR] {msg}")
        else:
            print(f"[\033[91mERROR\033[0m] {msg}")

    def _ok(self, msg):
        if self.args.nocolor:
            print(f"[OK   ] {msg}")
        else:
            print(f"[\033[92mOK   \033[0m] {msg}")

    def _note(self, msg):
        if self.args.nocolor:
            print(f"[NOTE ] {msg}")
        else:
            print(f"[\033[94mNOTE \033[0m] {msg}")

    def _warn(self, msg):
        if self.args.nocolor:
            print(f"[WARN ] {msg}")
        else:
            print(f"[\033[93mWARN \033[0m] {msg}")

    def _read_graph(self):
        if self.args.graph_file == "-":
            return sys.stdin.read()
        with open(self.args.graph_file, "r", encoding="utf-8") as f:
            return f.read()

    def check(self):
        if self.args.graph_file != "-" and not os.path.exists(self.args.graph_file):
            self._error(f"Graph file does not exist: {self.args.graph_file}")
            return 1

        if self.args.max_signatures < 2:
            self._error("--max-signatures must be at least 2")
            return 1

        try:
            graph_contents = self._read_graph()
        except (OSError, UnicodeDecodeError) as e:
            self._error(f"Could not read graph file: {e}")
            return 1

        try:
            releases = parse_graph(graph_contents)
        except InvalidGraph as e:
            self._error(f"Invalid release graph: {e}")
            return 1

        if self.args.tracked is None:
            tracked_strings = [release.version for release in releases]
        else:
            tracked_strings = self.args.tracked

        try:
            tracked_versions = parse_tracked_versions(tracked_strings)
        except VersionParseFailure as e:
            if self.args.tracked is None and not self.args.strict_versions:
                # Bad versions in the graph are skipped again when filtering.
                tracked_versions = self._parse_tracked_leniently(tracked_strings)
            else:
                self._error(str(e))
                return 1

        verifier = MirrorSignatureVerifier(
            base_url=self.args.base_url,
            timeout=self.args.timeout,
            max_signatures=self.args.max_signatures,
        )
        try:
            batch = asyncio.run(
                verifier.verify(
                    releases, tracked_versions, strict=self.args.strict_versions
                )
            )
        except VersionParseFailure as e:
            self._error(str(e))
            self._note("Drop --strict-versions to skip such releases instead.")
            return 1

        if not batch.success:
            self._error(
                f"Signature check failed for {len(batch.failures)} of {len(batch.results)} releases."
            )
            for failure in batch.failures:
                self._error(
                    f"{failure.release.version}: {failure.release.payload or '(no payload)'}"
                )
                for error in failure.errors:
                    self._note(f"  {error}")
            return 3

        self._ok(f"Found signatures for all {len(batch.results)} tracked releases.")
        return 0

    def _parse_tracked_leniently(self, versions):
        tracked_versions = set()
        for version in versions:
            try:
                tracked_versions |= parse_tracked_versions([version])
            except VersionParseFailure as e:
                self._warn(f"Skipping release: {e}")
        return tracked_versions


def main(args):
    cli = ReleaseSigcheckCLI(args)
    cli.logger.debug("Running requested command/passing to function")
    exitcode = cli.run_command()
    cli.logger.info("Script ends here, rc=%d", exitcode)
    return exitcode


def run():
    """Calls :func:`main` passing the CLI arguments extracted from :obj:`sys.argv`

    This function can be used as entry point to create console scripts with setuptools.
    """
    return main(sys.argv[1:])


if __name__ == "__main__":
    run()
