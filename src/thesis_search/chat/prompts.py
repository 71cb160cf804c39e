"""
Prompt templates and canned texts for the chat flow.

Kept apart from the nodes so wording can change without touching logic.
"""

REWRITE_INSTRUCTIONS = """You rewrite questions about an academic thesis repository into search queries for a semantic search engine.

Rules:
- Expand acronyms and abbreviations (e.g. "NLP" -> "natural language processing")
- Add close synonyms and related academic terms
- Remove conversational filler ("can you tell me", "I was wondering")
- Resolve references like "it" or "that topic" using the conversation
- Keep it to one or two short sentences or phrases
- Output ONLY the search query, with no explanation or quotes"""

ANSWER_INSTRUCTIONS = """You are an AI assistant helping users explore an academic thesis repository. Answer questions about theses using ONLY the thesis context provided below.

Instructions:
- Answer based on the provided thesis context
- Cite theses by their number, e.g. [Thesis 2], when you use them
- If the context doesn't contain enough information, say so politely
- If asked about topics not in the context, state that the repository has no information on them
- Be concise but informative, and keep a conversational tone"""

CONTEXT_HEADER = "Here are some relevant theses from the repository:"

NO_RESULTS_ANSWER = (
    "I couldn't find any relevant theses in the repository to answer your question. "
    "Please try rephrasing your query or asking about different topics."
)

SUMMARY_TEMPLATE = """Provide a concise 2-3 sentence summary of the following thesis:

Title: {title}
Abstract: {abstract}

Summary:"""

GENERIC_SUGGESTIONS = [
    "What theses are available in the repository?",
    "Tell me about the latest research topics.",
    "What are the most recent theses in the repository?",
    "Which research areas have the most theses?",
]

TAG_SUGGESTION_TEMPLATES = [
    "What theses are related to {tag}?",
    "Can you summarize theses about {tag}?",
    "What are the most recent theses in the repository?",
    "Tell me about research on {tag}.",
]
