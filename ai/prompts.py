# =============================================================================
# ai/prompts.py - Task Prompt Templates
# =============================================================================
# Deterministic instruction prompts, one per task kind. User input is
# embedded verbatim between double quotes.
#
# Sentiment, classification and entity extraction ask for a JSON object;
# the task handlers parse it and fall back to keyword heuristics when the
# model answers in free text.
# =============================================================================

# Phrase the question-answering prompt asks the model to emit when the
# context does not contain the answer. TaskHandler keys has_answer off it.
NO_ANSWER_PHRASE = "cannot find the answer"


def build_sentiment_prompt(text: str) -> str:
    return f"""Analyze the sentiment of the following text. Respond with a JSON object containing:
- sentiment: "positive", "negative", or "neutral"
- confidence: a number between 0 and 1
- reasoning: brief explanation

Text: "{text}"

Response:"""


def build_classification_prompt(text: str, categories: list[str]) -> str:
    return f"""Classify the following text into one of these categories: {", ".join(categories)}.
Respond with a JSON object containing:
- category: the most appropriate category
- confidence: a number between 0 and 1
- reasoning: brief explanation

Text: "{text}"

Response:"""


def build_entity_prompt(text: str) -> str:
    return f"""Extract the named entities from the following text. Respond with a JSON object containing:
- entities: a list of objects, each with "text" (the entity as written) and "type" (PERSON, ORGANIZATION, LOCATION, DATE, or OTHER)
- confidence: a number between 0 and 1

Text: "{text}"

Response:"""


def build_summarization_prompt(text: str, max_length: int) -> str:
    return f"""Summarize the following text in approximately {max_length} words. Make it concise and capture the key points.

Text: "{text}"

Summary:"""


def build_question_answering_prompt(question: str, context: str) -> str:
    return f"""Answer the following question based on the provided context. If the answer cannot be found in the context, say "I {NO_ANSWER_PHRASE} in the provided context."

Context: "{context}"

Question: "{question}"

Answer:"""


def build_content_generation_prompt(prompt: str, style: str) -> str:
    return f"""Generate content based on the following prompt. Use a {style} tone and style.

Prompt: "{prompt}"

Generated content:"""


def build_chat_prompt(message: str) -> str:
    return f"""You are a helpful assistant. Reply to the user's message clearly and concisely.

User: "{message}"

Assistant:"""
