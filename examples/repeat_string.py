"""Build a small graph, evaluate it and save it.

Run with ``python examples/repeat_string.py`` and then inspect the saved file
with ``nodecalc show repeat_string.toml``.
"""

from pathlib import Path

import nodecalc as nc

editor = nc.Editor()

count = editor.create("New number").node_id
word = editor.create("Repeat string").node_id
sentence = editor.create("Repeat string").node_id
assert count is not None
assert word is not None
assert sentence is not None

editor.set_input_value(count, 0, "3")
editor.set_input_value(word, 0, "ab")
editor.connect(count, word, 1)

# The same count also feeds a second node
editor.set_input_value(sentence, 0, "-\\n")
editor.connect(count, sentence, 1)

print(editor.evaluate(word).text)
print(editor.evaluate(sentence).text)

# Feeding a node back into its own chain is rejected
result = editor.connect(word, word, 0)
print(result.code, result.error)

editor.persist(Path("repeat_string.toml"))
