#!/usr/bin/env python3
import sys

import yaml

from bootstrapctl.exceptions import ConfigurationError
from bootstrapctl.models import TenantControlPlane, network_problems


def fail(msg):
    print(f"❌ {msg}")
    sys.exit(1)


if len(sys.argv) != 2:
    fail("Usage: validate-tenant.py <path/to/tenantcontrolplane.yaml>")

yaml_path = sys.argv[1]

try:
    with open(yaml_path) as f:
        manifest = yaml.safe_load(f)
except Exception as e:
    fail(f"Invalid YAML: {e}")

# JSON schema validation
try:
    tcp = TenantControlPlane.from_dict(manifest)
except ConfigurationError as e:
    fail(str(e))

for problem in network_problems(tcp):
    fail(problem)

if tcp.spec.network.port != 6443:
    print(f"⚠️  API server port {tcp.spec.network.port} differs from the kubeadm default 6443.")

print(f"✅ {tcp.name} validation passed.")
