"""
Core protocols for pylm.

Structural interfaces (typing.Protocol) rather than ABCs, so any object
with the right shape can act as a backend.
"""

from typing import Protocol, TypeVar, runtime_checkable

from pylm.core.result import Result

D = TypeVar('D', contravariant=True)  # Design type
P = TypeVar('P', covariant=True)      # Parameter payload type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    A backend takes a validated design and produces a parameter payload
    wrapped in a Result envelope. Backends are stateless: all
    configuration is passed at construction time, so one instance can
    serve concurrent calls.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}', e.g. 'cpu_qr'.
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the statistical computation.

        Raises:
            NumericalError: If numerical issues prevent a solution
            ValidationError: If the design is invalid for this backend
        """
        ...
