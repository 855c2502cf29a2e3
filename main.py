from stroke_risk.pipeline import PipelineRunner


def main() -> None:
    """Run the full stroke prediction pipeline."""
    runner = PipelineRunner("config/default.yaml")
    runner.run()


if __name__ == "__main__":
    main()
