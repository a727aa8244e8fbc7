"""Re-pack previously compiled bundles and check them against recorded digests."""

import json
from pathlib import Path

from fnbundle import ArtifactManifest, BatchBundler, BuildConfiguration, EsbuildCompiler, FunctionEntry, pack_functions


def repack_and_verify() -> None:
    config = BuildConfiguration.from_mapping({"skipBundle": True, "nativeZip": True})
    entries = [FunctionEntry(entry="src/orders.ts", function={"handler": "src/orders.handler"}, alias="orders")]
    build_dir = Path(".esbuild/.build")

    results = BatchBundler(compiler=EsbuildCompiler(), build_dir=build_dir).bundle(entries, config)
    manifest = pack_functions(results, build_dir=build_dir, output_dir=Path(".serverless"), native_zip=True)

    recorded = ArtifactManifest(**json.loads(Path("artifacts.json").read_text(encoding="utf-8")))
    result = manifest.verify(recorded.digests)
    for mismatch in result.mismatches:
        print(f"{mismatch.alias}: {mismatch.reason} ({mismatch.hint})")


if __name__ == "__main__":
    repack_and_verify()
