import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from rich.console import Console

from tinyrna_setup.config import SetupContext
from tinyrna_setup.console import main_console, status, success
from tinyrna_setup.constants import LOG_ENV_CREATE, LOG_ENV_REMOVE, RECREATE_NO, RECREATE_YES
from tinyrna_setup.errors import (
    CreationVerificationFailed,
    InvalidRecreateChoice,
    LockfileNotFound,
    ProvisionAborted,
    RemovalFailed,
)
from tinyrna_setup.models import ProvisionOutcome, ProvisionRequest, ProvisionState
from tinyrna_setup.runner import ProcessSupervisor
from tinyrna_setup.tool import RuntimeTool

from .registry import EnvironmentRegistry

LOG = logging.getLogger(__name__)

Prompt = Callable[[str], str]


def prompt_recreate(env_name: str, console: Console = main_console) -> str:
    """
    Ask the operator whether an existing environment may be replaced.

    The raw reply is returned; interpreting it is up to the caller.
    """
    console.print()
    console.print(f"The Conda environment {env_name} already exists.")
    console.print("It must be removed and recreated.")
    console.print()
    return console.input("Would you like to proceed? \\[y/n]: ")


class EnvironmentProvisioner:
    """
    Creates the named environment from a lockfile, replacing an existing one
    only with the operator's consent.

    An existing environment is never updated in place: it is removed and
    built again. Creation counts as successful only once the environment
    shows up in a fresh listing, whatever the exit code of `create`.
    """

    def __init__(
        self,
        tool: RuntimeTool,
        context: SetupContext,
        supervisor: ProcessSupervisor,
        registry: Optional[EnvironmentRegistry] = None,
        prompt: Optional[Prompt] = None,
        console: Console = main_console,
    ) -> None:
        self.tool = tool
        self.context = context
        self.supervisor = supervisor
        self.registry = registry or EnvironmentRegistry(supervisor)
        self.console = console
        self.prompt = prompt or (lambda name: prompt_recreate(name, console=console))

        self._handlers: Dict[
            ProvisionState, Callable[[ProvisionOutcome], ProvisionState]
        ] = {
            ProvisionState.CHECK_EXISTING: self._check_existing,
            ProvisionState.CONFIRM_RECREATE: self._confirm_recreate,
            ProvisionState.REMOVE: self._remove,
            ProvisionState.CREATE: self._create,
            ProvisionState.VERIFY_CREATE: self._verify_create,
        }

    def provision(self, request: ProvisionRequest) -> ProvisionOutcome:
        """
        Run the provisioning flow to a terminal state.

        Raises:
            LockfileNotFound: Before touching anything, if the lockfile is missing.
            ProvisionAborted: The operator answered "n".
            InvalidRecreateChoice: The operator answered anything but "y" or "n".
            RemovalFailed: The existing environment could not be removed.
            CreationVerificationFailed: The environment is not listed after creation.
        """
        if not Path(request.lockfile).is_file():
            raise LockfileNotFound(request.lockfile)

        outcome = ProvisionOutcome(request=request)
        state = ProvisionState.CHECK_EXISTING

        while not state.is_terminal:
            outcome.states.append(state)
            LOG.debug("Provisioning %s: %s", request.env_name, state.value)
            try:
                state = self._handlers[state](outcome)
            except (ProvisionAborted, InvalidRecreateChoice):
                outcome.states.append(ProvisionState.ABORTED)
                raise
            except (RemovalFailed, CreationVerificationFailed):
                outcome.states.append(ProvisionState.FAILED)
                raise

        outcome.states.append(state)
        return outcome

    def tear_down(self, env_name: str) -> Path:
        """
        Remove an environment, capturing the tool output to a log file.

        Returns:
            Path: The log file.

        Raises:
            RemovalFailed: The removal command exited non-zero.
        """
        log_path = self.context.log_path(LOG_ENV_REMOVE)

        status(f"Removing {env_name} environment...", console=self.console)
        result = self.supervisor.run(
            self.tool.env_remove_command(env_name), log_path=log_path
        )

        if not result.succeeded:
            raise RemovalFailed(env_name, log_path)

        success(f"{env_name} environment removed", console=self.console)
        return log_path

    def _check_existing(self, outcome: ProvisionOutcome) -> ProvisionState:
        if self.registry.exists(self.tool, outcome.request.env_name):
            return ProvisionState.CONFIRM_RECREATE
        return ProvisionState.CREATE

    def _confirm_recreate(self, outcome: ProvisionOutcome) -> ProvisionState:
        reply = self.prompt(outcome.request.env_name)
        self.console.print()

        if reply == RECREATE_YES:
            outcome.recreated = True
            return ProvisionState.REMOVE
        if reply == RECREATE_NO:
            raise ProvisionAborted()

        raise InvalidRecreateChoice(reply)

    def _remove(self, outcome: ProvisionOutcome) -> ProvisionState:
        outcome.log_paths.append(self.tear_down(outcome.request.env_name))
        return ProvisionState.CREATE

    def _create(self, outcome: ProvisionOutcome) -> ProvisionState:
        request = outcome.request
        log_path = self.context.log_path(LOG_ENV_CREATE)

        status(
            f"Setting up {request.env_name} environment (this may take a while)...",
            console=self.console,
        )
        with self.console.status(f"Creating {request.env_name} from {request.lockfile}"):
            result = self.supervisor.run(
                self.tool.env_create_command(request.env_name, request.lockfile),
                log_path=log_path,
            )

        # The exit code is only informative, the listing decides
        if not result.succeeded:
            LOG.warning(
                "%s create exited with %s, checking the environment list",
                self.tool.name,
                result.returncode,
            )

        outcome.log_paths.append(log_path)
        return ProvisionState.VERIFY_CREATE

    def _verify_create(self, outcome: ProvisionOutcome) -> ProvisionState:
        request = outcome.request
        record = self.registry.find(self.tool, request.env_name)

        if record is None:
            raise CreationVerificationFailed(request.env_name, outcome.log_paths[-1])

        outcome.record = record
        success(f"{request.env_name} environment setup complete", console=self.console)
        return ProvisionState.PROVISIONED
