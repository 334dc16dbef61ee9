from __future__ import annotations

from collections.abc import Mapping

from tfmodel.constants import DEFAULT_SIGNATURE
from tfmodel.errors import LoadError
from tfmodel.ir import SignatureDef, format_shape


class SavedModelReader:
    """
    Signature-based discovery and layer/node name resolution for SavedModels.

    Layer names are the keys of the signature's input/output maps, node names
    are the runtime tensor names the session feeds and fetches. Name lists are
    ordered by node name since the signature's own ordering is not stable.
    """

    def __init__(
        self,
        signatures: Mapping[str, SignatureDef],
        signature: str = DEFAULT_SIGNATURE,
    ) -> None:
        if signature not in signatures:
            available = ", ".join(sorted(signatures)) or "none"
            raise LoadError(
                f"Signature '{signature}' not found in SavedModel (available: {available})"
            )
        self.signatures = dict(signatures)
        self.signature = signature

    @property
    def signature_def(self) -> SignatureDef:
        return self.signatures[self.signature]

    def node_by_layer(self, layer_name: str) -> str:
        """Node name for a layer name, "" if the layer is not part of the signature."""
        for layer, info in self.signature_def.tensors():
            if layer == layer_name:
                return info.name
        return ""

    def layer_by_node(self, node_name: str) -> str:
        for layer, info in self.signature_def.tensors():
            if info.name == node_name:
                return layer
        return ""

    def input_names(self, layer_names: bool = False) -> list[str]:
        return self._names(self.signature_def.inputs.values(), layer_names)

    def output_names(self, layer_names: bool = False) -> list[str]:
        return self._names(self.signature_def.outputs.values(), layer_names)

    def _names(self, infos, layer_names: bool) -> list[str]:
        names = sorted(info.name for info in infos)
        if layer_names:
            return [self.layer_by_node(name) for name in names]
        return names

    def name_tables(self) -> tuple[dict[str, str], dict[str, str]]:
        """Return (node -> layer, layer -> node) over the signature's inputs and outputs."""
        node2layer: dict[str, str] = {}
        layer2node: dict[str, str] = {}
        for nodes in (self.input_names(), self.output_names()):
            for node in nodes:
                layer = self.layer_by_node(node)
                node2layer[node] = layer
                layer2node[layer] = node
        return node2layer, layer2node

    def node_shape(self, node_name: str) -> list[int]:
        for _, info in self.signature_def.tensors():
            if info.name == node_name:
                return list(info.shape)
        return []

    def node_type(self, node_name: str) -> str | None:
        for _, info in self.signature_def.tensors():
            if info.name == node_name:
                return info.dtype
        return None

    def info_string(self) -> str:
        lines = ["SavedModel Info:", "Signatures:"]
        for sig_name in sorted(self.signatures):
            sig = self.signatures[sig_name]
            lines.append(f"  {sig_name}")
            for title, tensors in (("Inputs", sig.inputs), ("Outputs", sig.outputs)):
                lines.append(f"    {title}: {len(tensors)}")
                for layer in sorted(tensors):
                    info = tensors[layer]
                    lines.append(f"      {layer}: {info.name}")
                    lines.append(f"        Shape: {format_shape(info.shape)}")
                    lines.append(f"        DataType: {info.dtype or 'invalid'}")
        return "\n".join(lines) + "\n"
