"""AI helpers over the host inference capabilities."""

import asyncio
import json

from artefact.core.host import get_host


def categorise(content, choices, classifier=None):
    """
    Categorise input text into one of the provided choices.

    :param content: The input text to categorise.
    :param choices: A list of strings representing the possible categories.
    :param classifier: Optional classification capability, defaults to the bound host's.
    :return: The category that best matches the input.
    """
    classifier = classifier or get_host().classifier
    return classifier(content, list(choices))


def predict(content, schema, predictor=None):
    """
    Predict structured output for a given prompt. This is the low-level completion call: the reply is returned as
    text, unparsed.

    :param content: The input prompt or data.
    :param schema: A JSON schema string, a Schema, or an object serialized to JSON, guiding the output structure.
    :param predictor: Optional prediction capability, defaults to the bound host's.
    :return: A JSON-formatted string (or plain text, if the host could not produce JSON).
    """
    predictor = predictor or get_host().predictor
    if isinstance(schema, str):
        schema_str = schema
    elif hasattr(schema, "to_json"):
        schema_str = schema.to_json()
    else:
        schema_str = json.dumps(schema)
    return predictor(content, schema_str)


async def categorise_async(content, choices, classifier=None):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, categorise, content, choices, classifier)


async def predict_async(content, schema, predictor=None):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, predict, content, schema, predictor)
