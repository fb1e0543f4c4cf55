from visualgenie.schemas import DiagramType


# Starting source loaded whenever the diagram type is switched
DEFAULT_EXAMPLES: dict[DiagramType, str] = {
    DiagramType.MERMAID: """sequenceDiagram
    participant Alice
    participant Bob
    Bob->>Alice: Hi Alice
    Alice->>Bob: Hi Bob""",
    DiagramType.GRAPHVIZ: """digraph G {
    A -> B;
    B -> C;
    C -> A;
}""",
    DiagramType.BPMN: """<?xml version="1.0" encoding="UTF-8"?>
<definitions xmlns="http://www.omg.org/spec/BPMN/20100524/MODEL">
  <process id="Process_1">
    <startEvent id="StartEvent_1"/>
  </process>
</definitions>""",
    DiagramType.EXCALIDRAW: """{
  "type": "rectangle",
  "x": 100,
  "y": 100,
  "width": 200,
  "height": 100
}""",
}


def example_for(diagram_type: DiagramType) -> str:
    return DEFAULT_EXAMPLES[DiagramType(diagram_type)]
