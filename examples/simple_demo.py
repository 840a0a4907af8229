#!/usr/bin/env python3  # noqa: EXE001
"""
Minimal demonstration of stepflow

Runs a three-step workflow with the offline demo substitute and prints each
step's output. No API key is needed.
"""  # noqa: D212, D415

import asyncio

from stepflow import (
    AIStep,
    BulletPoints,
    FormatterStep,
    PipelineRunner,
    RunConfiguration,
    Tone,
    ToneKind,
)


async def main():  # noqa: ANN201, D103
    runner = PipelineRunner()
    steps = [
        AIStep("Summarize"),
        FormatterStep(BulletPoints()),
        FormatterStep(Tone(ToneKind.PROFESSIONAL)),
    ]
    text = "The launch moved to Friday. Marketing needs the final copy. Legal signed off."

    def on_progress(current: int, total: int) -> None:
        print(f"[{current}/{total}]")

    result = await runner.run_with_trace(
        steps, text, RunConfiguration.local_demo(), on_progress
    )

    for step in result.steps:
        print(f"{step.index}. {step.title}\n{step.output}\n")
    print("Final output:")
    print(result.final_output)


if __name__ == "__main__":
    asyncio.run(main())
