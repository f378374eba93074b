from forest.envelope import failure_envelope, success_envelope
from forest.invokers import get_transaction_id
from forest.workflow import WorkflowHelpers


class FakeWorkflowHelpers:
    """Stand-in for the dispatcher: records sub-calls and answers with canned envelopes."""

    def __init__(self, contract_result=None, api_results=None):
        self.contract_calls = []
        self.api_calls = []
        self.contract_result = contract_result
        self.api_results = api_results or {}

    async def invoke_contract(self, skill_name, method, args, chain, source, trace_id):
        self.contract_calls.append(
            {"skill": skill_name, "method": method, "args": args, "chain": chain, "trace_id": trace_id}
        )
        if self.contract_result is not None:
            return self.contract_result
        return success_envelope({"transactionId": f"tx-{method.lower()}", "result": {}}, trace_id)

    async def invoke_api(self, skill_name, action, params, source, trace_id):
        self.api_calls.append({"skill": skill_name, "action": action, "params": params, "trace_id": trace_id})
        if action in self.api_results:
            return self.api_results[action]
        return success_envelope({"action": action, "result": {"action": action, "ok": True}}, trace_id)

    def build(self):
        return WorkflowHelpers(
            invoke_contract=self.invoke_contract,
            invoke_api=self.invoke_api,
            get_transaction_id=get_transaction_id,
        )


def upstream_failure(message="mock failure", code="UPSTREAM_ERROR"):
    return failure_envelope(code, message, retryable=True, trace_id="sub")
