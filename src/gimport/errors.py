"""Error taxonomy for the import command.

Every fatal error carries the process exit code it maps to, so the
top-level handler can turn any of them into a status without knowing
which phase raised it.
"""

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_LOW_MEMORY = 2
EXIT_INTERRUPTED = 130


class ImportCmdError(Exception):
    """Base class for errors that terminate the run."""

    exit_code = EXIT_FAILURE


class ValidationError(ImportCmdError):
    """Bad arguments or an unusable project path."""

    exit_code = EXIT_FAILURE


class ImportFailure(ImportCmdError):
    """Opening, configuring or refreshing the project failed."""

    exit_code = EXIT_FAILURE


class ResourceExhaustion(ImportCmdError):
    """The low-memory watchdog fired."""

    exit_code = EXIT_LOW_MEMORY


class CompileFailure(ImportCmdError):
    """Compilation finished with errors, was aborted, or stopped reporting."""

    exit_code = EXIT_FAILURE

    def __init__(self, outcome):
        """Initialize from the compile outcome that failed.

        Args:
            outcome: CompileOutcome describing the failed compilation
        """
        self.outcome = outcome
        if outcome.timed_out:
            reason = "compiler stopped without reporting completion"
        elif outcome.aborted:
            reason = "compilation aborted"
        else:
            reason = f"{outcome.error_count} error(s)"
        super().__init__(f"Compilation has failed: {reason}")
