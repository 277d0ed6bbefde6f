"""
Parameter binding for commands.

Callers pass parameters as a flat sequence alternating name and value:

    worker.execute('UPDATE t SET name = :name WHERE id = :id',
                   'name', 'Ada', 'id', 1)

Order and duplicates are preserved as given. Empty strings and None
are both bound as the provider's null marker; every other value is
bound unchanged and left to the driver's own parameterization.
"""
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from dbaccess.exceptions import OddLengthParameterList

if TYPE_CHECKING:
    from dbaccess.command import Command

logger = logging.getLogger(__name__)


def iter_pairs(params: Sequence[Any] | None):
    """Yield (name, value) pairs from a flat alternating sequence.

    Raises
        OddLengthParameterList: If a name has no value
    """
    if not params:
        return
    if len(params) % 2:
        raise OddLengthParameterList(len(params))
    for i in range(0, len(params), 2):
        yield params[i], params[i + 1]


def bind_value(value: Any, null_marker: Any = None) -> Any:
    """Apply the null substitution rule to a single value.

    >>> bind_value('') is None
    True
    >>> bind_value(0)
    0
    """
    if value is None:
        return null_marker
    if isinstance(value, str) and value == '':
        return null_marker
    return value


def bind_parameters(command: 'Command', params: Sequence[Any] | None) -> int:
    """Bind a flat name/value sequence onto a command.

    Args:
        command: Command to receive the parameters
        params: Sequence alternating name, value, name, value, ...

    Returns
        Number of parameters bound

    Raises
        OddLengthParameterList: If the sequence has odd length; nothing is bound
    """
    pairs = list(iter_pairs(params))
    provider = command.provider
    for name, value in pairs:
        param = command.create_parameter()
        param.name = provider.parameter_name(name)
        param.value = bind_value(value, provider.null_marker)
        command.parameters.append(param)
    if pairs:
        logger.debug(f'Bound {len(pairs)} parameters')
    return len(pairs)
