"""Built-in code samples for trying out ``explainer explain``."""

from __future__ import annotations

SAMPLES: dict[str, str] = {
    "javascript": """function fibonacci(num) {
  if (num <= 0) return [];
  if (num === 1) return [0];
  if (num === 2) return [0, 1];

  const result = [0, 1];

  for (let i = 2; i < num; i++) {
    result.push(result[i-1] + result[i-2]);
  }

  return result;
}""",
    "python": """def fibonacci(num):
    if num <= 0:
        return []
    if num == 1:
        return [0]
    if num == 2:
        return [0, 1]

    result = [0, 1]

    for i in range(2, num):
        result.append(result[i-1] + result[i-2])

    return result""",
    "typescript": """function fibonacci(num: number): number[] {
  if (num <= 0) return [];
  if (num === 1) return [0];
  if (num === 2) return [0, 1];

  const result: number[] = [0, 1];

  for (let i = 2; i < num; i++) {
    result.push(result[i-1] + result[i-2]);
  }

  return result;
}""",
}
