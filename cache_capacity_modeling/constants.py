###############################################################################
#                                   Units                                     #
###############################################################################

K = 1000
M = K * 1000
KIB_IN_BYTES = 1024
MIB_IN_BYTES = 1024 * KIB_IN_BYTES
GIB_IN_BYTES = 1024 * MIB_IN_BYTES
GIB_IN_MIB = GIB_IN_BYTES // MIB_IN_BYTES

###############################################################################
#                       Throughput and connections                            #
###############################################################################

QPS_RANGE = (1, 100 * M)
DEFAULT_QPS = 1 * M
NCONN_RANGE = (1, 500 * K)
DEFAULT_NCONN = 500
# 2 16KiB buffers, one channel, and stream overhead
CONN_OVERHEAD = 33 * KIB_IN_BYTES
# 2 32KiB buffers, one channel, and stream overhead
TLS_OVERHEAD = 64 * KIB_IN_BYTES

###############################################################################
#                                Data sizes                                   #
###############################################################################

SIZE_RANGE = (8, 16 * MIB_IN_BYTES)
DEFAULT_SIZE = 64
NKEY_RANGE = (1 * K, 10 * M)
DEFAULT_NKEY = 100 * K

###############################################################################
#                          Cluster and reliability                            #
###############################################################################

# (%)
FAILURE_DOMAIN_RANGE = (0.1, 100.0)
# 5% of the nodes may be lost at once
DEFAULT_FAILURE_DOMAIN = 5.0
# Placement: never more than this many jobs of one cluster per host
MAX_HOST_LIMIT = 10
# A somewhat arbitrary ratio between rack and host limits
RACK_TO_HOST_RATIO = 2.0

###############################################################################
#                           Hash table and segments                           #
###############################################################################

# Average number of keys per hash bucket
HASH_OCCUPANCY_RANGE = (0.1, 2.0)
DEFAULT_HASH_OCCUPANCY = 0.75
SEGMENT_SIZE_RANGE = (4 * KIB_IN_BYTES, 2 * GIB_IN_BYTES)
DEFAULT_SEGMENT_SIZE = 1 * MIB_IN_BYTES
# Per hash table entry
HASH_ENTRY_OVERHEAD = 10
ITEM_HEADER_SIZE = 5
CAS_SIZE = 8
KEYVAL_ALIGNMENT = 8

###############################################################################
#                                 Process                                     #
###############################################################################

# In MiB
SAFETY_BUF = 128
BASE_OVERHEAD = 10
# Much lower than single-instance max, picked to scale to 10 jobs/host
KQPS = 60 * K

###############################################################################
#                                   Job                                       #
###############################################################################

CPU_PER_JOB = 2.0
# In GiB
DISK_PER_JOB = 3
RAM_CANDIDATES = (4, 8)
# Alert when too many jobs are needed
WARNING_THRESHOLD = 10000
