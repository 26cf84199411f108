"""Instruction strings sent to the Dify apps and fal.ai models."""

from typing import Any, Optional

STRUCTURE_NAMES = {
    "freytag": "Freytag's Pyramid",
    "threeAct": "Three Act Structure",
    "fichtean": "Fichtean Curve",
}


def book_selection_query(review_type: str, book_title: str) -> str:
    return (
        f"The student wants to write a {review_type} review for the book: {book_title}. "
        "Please help them select this book and guide them. When appropriate, you can say "
        "\"Let's start writing\" to indicate they can proceed."
    )


def book_summary_query(book_title: str) -> str:
    return (
        f"Please give a short, child-friendly summary of the book \"{book_title}\" in 3-5 sentences. "
        "Do not reveal the ending."
    )


def conversation_transcript(history: list[dict]) -> str:
    lines = []
    for message in history:
        role = "Student" if message.get("role") == "user" else "AI"
        lines.append(f"{role}: {message.get('content', '')}")
    return "\n\n".join(lines)


def plot_summary_query(transcript: str) -> str:
    return f"""Please analyze the following conversation between a student and an AI about creating a story plot, and summarize the Setting, Conflict, and Goal:

{transcript}

Only respond if there is enough information in the conversation to determine all three (Setting, Conflict, and Goal). Format your response exactly as:
setting: [setting]
conflict: [conflict]
goal: [goal]

When each part (setting, conflict, and goal) is clear and complete, you can output "done" on a new line."""


def character_info(character: Optional[dict]) -> str:
    character = character or {}
    traits = character.get("traits") or []
    if not isinstance(traits, list):
        traits = [traits]
    lines = [
        f"Character name: {character.get('name') or 'Unknown'}",
        f"Species: {character['species']}" if character.get("species") else "",
        f"Age: {character['age']} years old" if character.get("age") else "",
        f"Traits: {', '.join(str(t) for t in traits)}" if traits else "",
        f"Description: {character['description']}" if character.get("description") else "",
    ]
    return "\n".join(line for line in lines if line)


def plot_info(plot: Optional[dict]) -> str:
    plot = plot or {}
    return "\n".join(
        [
            f"Setting: {plot.get('setting') or 'Unknown'}",
            f"Conflict: {plot.get('conflict') or 'Unknown'}",
            f"Goal: {plot.get('goal') or 'Unknown'}",
        ]
    )


def all_structures_query(character: Optional[dict], plot: Optional[dict]) -> str:
    # The structure app is prompted in Chinese; the labels stay English for the parser
    return f"""根据我输入的人物和情节，生成简短的实例故事，分别为Freytag's Pyramid结构、Three Act Structure结构、Fichtean Curve结构。

人物信息：
{character_info(character)}

情节信息：
{plot_info(plot)}

请生成三个简短的故事（每个3-5句话），分别使用以下三种结构：
1. Freytag's Pyramid（起承转合结构）
2. Three Act Structure（三幕结构）
3. Fichtean Curve（多危机结构）

请按照以下格式输出，每个故事之间用"---"分隔：
**Freytag's Pyramid:**
[故事内容]

**Three Act Structure:**
[故事内容]

**Fichtean Curve:**
[故事内容]

所有故事都应适合儿童阅读，有趣且引人入胜。"""


def single_structure_query(structure_name: str, character: Optional[dict], plot: Optional[dict]) -> str:
    return f"""根据我输入的人物和情节，生成简短的实例故事，使用{structure_name}结构。

人物信息：
{character_info(character)}

情节信息：
{plot_info(plot)}

请生成一个简短的故事（3-5句话），使用{structure_name}结构，适合儿童阅读，有趣且引人入胜。"""


def species_phrase(species: Any) -> str:
    if not species:
        return "a character"
    species = str(species)
    if species in ("Boy", "Girl"):
        return f"a young {species.lower()}"
    return f"a {species.lower()}"


def story_illustration_prompt(character: Optional[dict], plot: Optional[dict]) -> str:
    character = character or {}
    plot = plot or {}
    return (
        f"A charming illustration for a children's story: {species_phrase(character.get('species'))} "
        f"named {character.get('name') or 'a character'} in {plot.get('setting') or 'a setting'}, "
        f"{plot.get('conflict') or 'facing a challenge'}. Colorful, friendly, and suitable for children."
    )


def book_cover_prompt(book_title: str) -> str:
    return (
        f'Professional book cover for "{book_title}". Realistic hardcover book, front view, '
        "straight perspective, no tilt or angle. Elegant typography on front cover, realistic "
        "textures, bookstore quality, professional book design."
    )


def letter_reader_prompt(recipient: Optional[str], occasion: Optional[str]) -> str:
    return (
        f"A person reading a letter, recipient: {recipient}, occasion: {occasion}, "
        "warm and friendly atmosphere, realistic photo style"
    )
