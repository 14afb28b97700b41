"""
Resolution plan returned to transaction builders
"""

from dataclasses import dataclass, field
from typing import List

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey


@dataclass
class ResolutionPlan:
    """
    Instructions needed before a token account at `address` is usable

    Attributes:
        address: Token account the caller's operation should use
        token_program: Token program governing the account
        instructions: Prepend before the caller's operation
        cleanup_instructions: Append after the caller's operation
        signers: Extra keypairs that must co-sign the transaction
    """
    address: Pubkey
    token_program: Pubkey
    instructions: List[Instruction] = field(default_factory=list)
    cleanup_instructions: List[Instruction] = field(default_factory=list)
    signers: List[Keypair] = field(default_factory=list)

    @classmethod
    def existing(cls, address: Pubkey, token_program: Pubkey) -> "ResolutionPlan":
        """Plan for an account that is already usable as-is"""
        return cls(address=address, token_program=token_program)

    @property
    def is_noop(self) -> bool:
        return not self.instructions

    @property
    def requires_cleanup(self) -> bool:
        return bool(self.cleanup_instructions)

    @property
    def requires_signers(self) -> bool:
        return bool(self.signers)

    def __repr__(self) -> str:
        return (
            f"ResolutionPlan({self.address}, instructions={len(self.instructions)}, "
            f"cleanup={len(self.cleanup_instructions)}, signers={len(self.signers)})"
        )
