"""Resource identity constants shared by the aggregate and the projector."""

# Resource type metadata
NDM_DISK_KIND = 'Disk'
NDM_VERSION = 'openebs.io/v1alpha1'

# Label keys on the exported resource
KUBERNETES_HOSTNAME_LABEL = 'kubernetes.io/hostname'
NDM_DISK_TYPE_KEY = 'ndm.io/disk-type'
NDM_MANAGED_KEY = 'ndm.io/managed'
TRUE_STRING = 'true'

# Node attribute keys
NODE_NAME_KEY = 'nodename'

# Lifecycle state written at export time
NDM_ACTIVE = 'Active'
NDM_INACTIVE = 'Inactive'
NDM_UNKNOWN = 'Unknown'

# Device classification
NDM_DEFAULT_DISK_TYPE = 'disk'
NDM_SPARSE_DISK_TYPE = 'sparse'
NDM_PARTITION_DISK_TYPE = 'partition'
DISK_TYPES = (NDM_DEFAULT_DISK_TYPE, NDM_SPARSE_DISK_TYPE, NDM_PARTITION_DISK_TYPE)

# Device subtype
DRIVE_TYPE_HDD = 'HDD'
DRIVE_TYPE_SSD = 'SSD'
DRIVE_TYPE_UNKNOWN = 'Unknown'

# Rotation rate codes
ROTATION_RATE_UNREPORTED = 0
ROTATION_RATE_SOLID_STATE = 1

# Filesystem type recorded when a device carries no filesystem
FS_NONE = 'None'

# Devlink kinds
BY_ID_LINK = 'by-id'
BY_PATH_LINK = 'by-path'
