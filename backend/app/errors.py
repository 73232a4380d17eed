# errors.py
# Store-operation failures, translated to HTTP errors in main.py


class StoreError(Exception):
    pass


class ProposalNotFound(StoreError):
    def __init__(self, proposal_id: str):
        super().__init__(f"Proposal {proposal_id} not found")
        self.proposal_id = proposal_id


class ProposalAccessDenied(StoreError):
    def __init__(self, proposal_id: str):
        super().__init__(f"Proposal {proposal_id} belongs to another user")
        self.proposal_id = proposal_id
