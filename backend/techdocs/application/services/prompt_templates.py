"""Prompt templates for tutorial-style answers."""

from techdocs.domain.entities import ChatMessage

CONTEXT_PREAMBLE = "Based on the following relevant documentation:\n\n"

_GROUNDED_TUTORIAL = """User Question: {question}

Please generate a comprehensive tutorial in Markdown format based on the documentation above. Structure your response as follows:

# [Topic Name] Tutorial

## Overview
[Brief 2-3 sentence explanation of the topic]

## What You'll Learn
- [Learning objective 1]
- [Learning objective 2]
- [Learning objective 3]

## Prerequisites
- [Prerequisite 1]
- [Prerequisite 2]

## Step-by-Step Guide

### Step 1: [First Step]
[Detailed explanation with examples]

### Step 2: [Second Step]
[Detailed explanation with examples]

### Step 3: [Third Step]
[Detailed explanation with examples]

## Code Examples

### Basic Example
```[language]
[Code example here]
```

### Advanced Example
```[language]
[More complex code example]
```

## Best Practices
- [Best practice 1]
- [Best practice 2]
- [Best practice 3]

## Common Pitfalls to Avoid
- [Pitfall 1]
- [Pitfall 2]

## Summary
[Brief summary of what was covered]

## Next Steps
- [What to learn next 1]
- [What to learn next 2]

Keep the tutorial comprehensive, well-structured, and beginner-friendly. Use proper Markdown formatting with headers, code blocks, and bullet points."""

_UNGROUNDED_TUTORIAL = """User Question: {question}

Please provide a helpful and informative tutorial in Markdown format about this topic. If you don't have specific information, provide general guidance and suggest where they might find more detailed information.

Structure your response as a well-formatted Markdown tutorial with:

# [Topic Name]

## Overview
[Brief explanation]

## Key Concepts
- [Concept 1]
- [Concept 2]

## Getting Started
[Basic steps]

## Examples
[Practical examples]

## Resources
[Where to learn more]

Use proper Markdown formatting with headers, code blocks, and bullet points."""

_HISTORY_GROUNDED = """Current user question: {question}

Please generate a short, focused tutorial in Markdown format based on the documentation above. Consider the conversation history for context. Structure your response as follows:

# Quick Tutorial: [Topic Name]

## What is [Topic]?
[Brief 1-2 sentence explanation]

## Key Concepts:
- [Concept 1]
- [Concept 2]
- [Concept 3]

## Basic Example:
```[language]
[Provide a simple, practical example]
```

## Common Use Cases:
- [Use case 1]
- [Use case 2]

## Tips:
- [Tip 1]
- [Tip 2]

Keep the tutorial concise, practical, and beginner-friendly. Use proper Markdown formatting."""

_HISTORY_UNGROUNDED = """Current user question: {question}

Please provide a helpful and informative tutorial in Markdown format about this topic. Consider the conversation history for context. If you don't have specific information, provide general guidance and suggest where they might find more detailed information.

Structure your response as a well-formatted Markdown tutorial with proper headers, code blocks, and bullet points."""

_TOPIC_COMPLETE = """Generate a comprehensive tutorial for: {topic}

Please create a well-structured tutorial in Markdown format based on the scraped documentation above. Structure your response as follows:

# Complete Tutorial: {topic}

## Overview
[Provide a clear, concise overview of the topic]

## Prerequisites
[List any prerequisites or basic knowledge needed]

## Step-by-Step Guide

### Step 1: [First Step]
[Detailed explanation with examples]

### Step 2: [Second Step]
[Detailed explanation with examples]

### Step 3: [Third Step]
[Detailed explanation with examples]

## Code Examples

### Basic Example
```[language]
[Provide practical code examples]
```

### Advanced Example
```[language]
[More complex examples]
```

## Best Practices
- [Best practice 1]
- [Best practice 2]
- [Best practice 3]

## Common Pitfalls to Avoid
- [Pitfall 1]
- [Pitfall 2]

## Summary
[Brief summary of what was covered]

## Next Steps
[Suggest what to learn next]

Make the tutorial comprehensive yet easy to follow, with practical examples and clear explanations. Use proper Markdown formatting."""

_TOPIC_QUICK = """Generate a quick tutorial for: {topic}

Please create a concise tutorial in Markdown format based on the scraped documentation above. Structure your response as follows:

# Quick Tutorial: {topic}

## What is {topic}?
[Brief explanation]

## Key Concepts:
- [Concept 1]
- [Concept 2]
- [Concept 3]

## Basic Example:
```[language]
[Simple, practical example]
```

## Common Use Cases:
- [Use case 1]
- [Use case 2]

## Tips:
- [Tip 1]
- [Tip 2]

Keep it concise and practical for beginners. Use proper Markdown formatting."""


def format_context_entry(title: str, content: str) -> str:
    return f"Title: {title}\nContent: {content}"


def _context_block(context: list[str]) -> str:
    if not context:
        return ""
    return CONTEXT_PREAMBLE + "\n\n".join(context) + "\n\n"


def _history_block(history: list[ChatMessage]) -> str:
    if not history:
        return ""
    lines = "".join(f"{m.role}: {m.content}\n" for m in history)
    return f"Previous conversation:\n{lines}\n"


def build_chat_prompt(question: str, context: list[str]) -> str:
    """Grounded tutorial prompt when context exists, generic prompt otherwise."""
    if context:
        return _context_block(context) + _GROUNDED_TUTORIAL.format(question=question)
    return _UNGROUNDED_TUTORIAL.format(question=question)


def build_history_prompt(question: str, context: list[str], history: list[ChatMessage]) -> str:
    """Like ``build_chat_prompt`` but prefixed with the prior conversation."""
    template = _HISTORY_GROUNDED if context else _HISTORY_UNGROUNDED
    return _history_block(history) + _context_block(context) + template.format(question=question)


def build_topic_prompt(topic: str, context: list[str], *, quick: bool = False) -> str:
    template = _TOPIC_QUICK if quick else _TOPIC_COMPLETE
    return _context_block(context) + template.format(topic=topic)
