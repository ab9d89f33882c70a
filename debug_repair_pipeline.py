#!/usr/bin/env python3
"""
Traces a diagram through the repair pipeline step by step

Usage: python debug_repair_pipeline.py [path/to/diagram.mmd]
"""

import sys
import os
import logging

# Add server directory to path
sys.path.append(os.path.join(os.path.dirname(__file__), 'server'))

# Configure logging to see everything
logging.basicConfig(level=logging.DEBUG, format='%(levelname)s:%(name)s:%(message)s')

SAMPLE_DIAGRAM = '''flowchart TD
    A[File.open] -->|{:ok, file}| B[process(file)]
    A -->|{:error, msg}| C[IO.puts]
    B -->|""| D[Done]
    C -->|"{self, "World!"}"| E["receive"]
    E --> F["inner function"].
    click A href "javascript:alert(1)"
'''


def trace_repair_pipeline(source):
    """Run each stage separately and report what it changed"""
    print("🔬 MERMAID REPAIR PIPELINE TRACE")
    print("=" * 60)

    try:
        from mermaid_repair.internal.dialect import detect_diagram_type
        from mermaid_repair.internal.line_segmenter import segment_lines
        from mermaid_repair.internal.repair_pipeline import clean_diagram_source, recover_render_error
        from mermaid_repair.internal.security_filter import strip_dangerous_directives
        from mermaid_repair.internal.settings import get_trigger_table

        # Step 1: Dialect
        print("📊 Step 1: Detecting diagram type...")
        diagram_type = detect_diagram_type(source)
        print(f"✅ Diagram type: {diagram_type}")

        # Step 2: Security filter
        print("\n🛡️ Step 2: Stripping dangerous directives...")
        filtered = strip_dangerous_directives(source)
        print(f"📊 Characters removed: {len(source) - len(filtered)}")

        # Step 3: Segmentation
        print("\n🧩 Step 3: Segmenting lines...")
        for number, line in enumerate(segment_lines(filtered), start=1):
            if line.spans is None:
                labels = "UNSCANNABLE"
            else:
                labels = [span.raw_inner_text for span in line.spans]
            print(f"  {number:3d} {line.kind.value:<10} {line.text!r} {labels}")

        # Step 4: Full clean
        print("\n🧹 Step 4: Running security filter + sanitizer...")
        cleaned = clean_diagram_source(source, get_trigger_table())
        print(f"📊 Security stripped: {cleaned.security_stripped}")
        print(f"📊 Syntax fixed: {cleaned.syntax_fixed} {list(cleaned.syntax.rules_applied)}")
        print("🔍 Result:")
        print(cleaned.source)

        # Step 5: Render-error recovery on the cleaned output
        print("\n🚑 Step 5: Simulating a render error on the cleaned output...")
        outcome = recover_render_error(cleaned.source, "simulated parse error")
        print(f"📊 Recovery action: {outcome.action}")

        print("\n🎉 PIPELINE TRACE COMPLETE!")
        return True

    except Exception as e:
        print(f"❌ PIPELINE TRACE FAILED: {str(e)}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    if len(sys.argv) > 1:
        with open(sys.argv[1], encoding='utf-8') as f:
            diagram = f.read()
    else:
        diagram = SAMPLE_DIAGRAM

    success = trace_repair_pipeline(diagram)

    print("\n" + "=" * 60)
    if success:
        print("🎯 CONCLUSION: Pipeline ran end to end")
    else:
        print("🚨 CONCLUSION: Pipeline raised, see traceback above")
