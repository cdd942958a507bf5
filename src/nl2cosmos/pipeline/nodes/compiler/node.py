from nl2cosmos.pipeline.state import CompiledPrompt, QueryRequest
from .prompts import QUERY_GENERATOR_EXAMPLES, QUERY_GENERATOR_INSTRUCTIONS, QUERY_GENERATOR_PROMPT


class PromptCompiler:
    """Builds the system instructions and user prompt for query generation.

    Output is a pure function of the request and the container alias.
    """

    def __init__(self, alias: str = "c"):
        self.alias = alias

    def compile(self, request: QueryRequest) -> CompiledPrompt:
        values = {
            "alias": self.alias,
            "container_name": request.container_name,
            "partition_key_field": request.partition_key_field,
            "partition_key_value": request.partition_key_value,
        }
        examples = QUERY_GENERATOR_EXAMPLES.format(**values).strip()
        user_prompt = QUERY_GENERATOR_PROMPT.format(
            schema_descriptor=request.schema_descriptor,
            question=request.question,
            examples=examples,
            **values,
        )
        return CompiledPrompt(
            system_instructions=QUERY_GENERATOR_INSTRUCTIONS.format(alias=self.alias).strip(),
            user_prompt=user_prompt.strip(),
        )
